"""
f8forge.rendering - Template Rendering
======================================

Commands that write files only decide *which* template to use and *what*
parameters it gets. Producing the text is the job of a ``TemplateRenderer``.
The default ``JinjaTemplateRenderer`` loads templates shipped in
``f8forge/templates``; hosts with their own template machinery pass their
own renderer instead.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape


TEMPLATE_SUFFIX = ".j2"
XML_TEMPLATE_EXTENSIONS = ("xml.j2",)


class TemplateRenderer(Protocol):
    """Renders a named template with a parameter mapping."""

    def render(self, name: str, params: Mapping[str, Any]) -> str: ...


def create_jinja_env() -> Environment:
    """
    Create the Jinja2 environment for the packaged templates.

    Parameters rendered into ``*.xml.j2`` templates are escaped, so a
    project name holding ``&``, ``<`` or quotes still yields well-formed
    XML. Undefined parameters raise instead of rendering as empty strings,
    so a missing ``projectName`` fails loudly.
    """
    return Environment(
        loader=PackageLoader("f8forge", "templates"),
        autoescape=select_autoescape(
            enabled_extensions=XML_TEMPLATE_EXTENSIONS,
            default_for_string=False,
        ),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


class JinjaTemplateRenderer:
    """``TemplateRenderer`` backed by the packaged Jinja2 templates."""

    def __init__(self, env: Environment | None = None) -> None:
        self.env = env or create_jinja_env()

    def render(self, name: str, params: Mapping[str, Any]) -> str:
        """
        Render template ``name`` (with or without the ``.j2`` suffix).

        Raises
        ------
        jinja2.TemplateNotFound
            If there is no such template.
        jinja2.UndefinedError
            If the template uses a parameter that was not supplied.
        """
        if not name.endswith(TEMPLATE_SUFFIX):
            name += TEMPLATE_SUFFIX
        template = self.env.get_template(name)
        return template.render(**params)
