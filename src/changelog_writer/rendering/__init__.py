"""
Rendering of changelog releases.

:mod:`changelog_writer.rendering.templates` compiles the main template
and its partials; :mod:`changelog_writer.rendering.context` assembles
the context each release is rendered with.
"""

from .context import assemble_context, build_extras, render_release, safe_dumps  # noqa: F401
from .templates import TemplateError, TemplateRenderer, compile_templates  # noqa: F401
