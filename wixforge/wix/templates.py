"""Rendering of the builtin ``.wxs`` templates with Jinja2."""

from __future__ import annotations

import logging
from typing import Any
from xml.sax.saxutils import escape

from jinja2 import (
    BaseLoader,
    Environment,
    PackageLoader,
    StrictUndefined,
    TemplateNotFound,
    TemplateSyntaxError,
    UndefinedError,
)

from wixforge.errors import TemplateError

logger = logging.getLogger(__name__)

MAIN_TEMPLATE = "main.wxs.j2"

_ATTR_ENTITIES = {'"': "&quot;"}


def escape_attribute(value: str) -> str:
    """Escape *value* for use inside a double-quoted XML attribute."""
    return escape(value, _ATTR_ENTITIES)


class TemplateRenderer:
    """Renders named templates.

    Values are substituted verbatim (autoescaping is off), so callers pass
    already-escaped strings. Construct one per process, or one per test with
    a custom *loader*.
    """

    def __init__(self, loader: BaseLoader | None = None) -> None:
        self.env = Environment(
            loader=loader or PackageLoader("wixforge", "templates"),
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )

    def render(self, name: str, variables: dict[str, Any]) -> str:
        try:
            return self.env.get_template(name).render(**variables)
        except TemplateNotFound as e:
            raise TemplateError(f"Unknown template: {name}") from e
        except UndefinedError as e:
            raise TemplateError(f"Missing variable in template {name}: {e}") from e
        except TemplateSyntaxError as e:
            raise TemplateError(f"Invalid template syntax in {name}: {e}") from e
