"""
Configuration for changelog_writer.

Provides the writer options model and its normalization
(:mod:`changelog_writer.config.options`) and the JSON configuration
file loader used by the command line
(:mod:`changelog_writer.config.loader`).
"""

from .loader import ConfigError, load_config, load_templates  # noqa: F401
from .options import WriterOptions, resolve_context, resolve_options  # noqa: F401
