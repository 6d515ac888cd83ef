"""
Commit record handling for changelog_writer.

This package provides dotted-path access to records
(:mod:`changelog_writer.records.immutable`), chunk normalization
(:mod:`changelog_writer.records.normalizer`) and the default revert
filter (:mod:`changelog_writer.records.reverted`).
"""

from .immutable import get_path, set_path  # noqa: F401
from .normalizer import Computed, Fixed, as_field_rule, decode_chunk, normalize_commit  # noqa: F401
from .reverted import filter_reverted  # noqa: F401
