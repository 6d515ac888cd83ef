"""
Top-level package for changelog_writer.

Turns a stream of commit records into rendered changelog sections, one
per release. The main entry points are re-exported here; the command
line lives in ``changelog_writer.cli``.
"""

__all__ = [
    "__version__",
    "ChangelogWriterStream",
    "ReleaseEntry",
    "WriterOptions",
    "changelog_from_commits",
    "generate_changelog",
    "write_changelog",
]

__version__ = "0.1.0"

from changelog_writer.config.options import WriterOptions  # noqa: E402
from changelog_writer.writer import (  # noqa: E402
    ChangelogWriterStream,
    ReleaseEntry,
    changelog_from_commits,
    generate_changelog,
    write_changelog,
)
