"""
Template compilation for changelog releases.

Each :class:`TemplateRenderer` owns its own :class:`jinja2.Environment`
so partials registered by one renderer never leak into another. The
main template pulls partials in with ``{% include "header" %}``,
``{% include "commit" %}`` and so on. Output is not HTML-escaped.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from jinja2 import DictLoader, Environment, TemplateError as JinjaTemplateError


class TemplateError(Exception):
    """Raised when the templates are missing or cannot be compiled."""

    pass


STANDARD_PARTIALS = ("header", "commit", "footer")


class TemplateRenderer:
    """Compiled main template plus its named partials."""

    def __init__(
        self,
        main_template: Optional[str],
        header_partial: Optional[str] = None,
        commit_partial: Optional[str] = None,
        footer_partial: Optional[str] = None,
        partials: Optional[Mapping[str, Any]] = None,
    ) -> None:
        if not isinstance(main_template, str):
            raise TemplateError("A main template string is required")

        registry: Dict[str, str] = {}
        for name, source in zip(STANDARD_PARTIALS, (header_partial, commit_partial, footer_partial)):
            if isinstance(source, str):
                registry[name] = source
        for name, source in (partials or {}).items():
            if isinstance(source, str):
                registry[name] = source

        self.env = Environment(
            loader=DictLoader(registry),
            autoescape=False,
            keep_trailing_newline=True,
        )
        try:
            for name in registry:
                self.env.get_template(name)
            self._template = self.env.from_string(main_template)
        except JinjaTemplateError as exc:
            raise TemplateError(f"Failed to compile template: {exc}") from exc
        self.partial_names = tuple(registry)

    def render(self, context: Mapping[str, Any]) -> str:
        return self._template.render(dict(context))

    __call__ = render


def compile_templates(options: Any) -> TemplateRenderer:
    """Build a renderer from an object carrying the template options."""
    return TemplateRenderer(
        options.main_template,
        header_partial=options.header_partial,
        commit_partial=options.commit_partial,
        footer_partial=options.footer_partial,
        partials=options.partials,
    )
