#!/usr/bin/env python
"""
Thin wrapper script to invoke the changelog_writer CLI.

Running ``python write_changelog.py`` is equivalent to running the
``changelog-writer`` console script installed via ``pyproject.toml``.
"""

from changelog_writer.cli import main


if __name__ == "__main__":
    main(prog_name="changelog-writer")
