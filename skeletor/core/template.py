"""Template rendering for skeleton files and filenames.

Templates are Jinja2 with strict undefined handling: referencing a value
that does not exist fails the render instead of producing an empty string.
"""
import json
import re
from typing import Any, Mapping

import yaml
from jinja2 import Environment, StrictUndefined, TemplateError, TemplateSyntaxError

from skeletor.core.errors import TemplateRenderError

_non_alnum = re.compile(r"[^a-zA-Z0-9]+")


def package_name(value: str) -> str:
    """Derive a safe identifier from a path-like string.

    >>> package_name("github.com/acme/my-tool")
    'mytool'
    """
    last = str(value).split("/")[-1]
    return _non_alnum.sub("", last).lower()


def to_yaml(value: Any) -> str:
    """Serialize value to block-style YAML."""
    return yaml.safe_dump(_plain(value), default_flow_style=False, sort_keys=True)


def to_json(value: Any, indent: int = None) -> str:
    """Serialize value to JSON."""
    return json.dumps(_plain(value), indent=indent, sort_keys=True)


def _plain(value: Any) -> Any:
    """Convert objects exposed to templates into plain data for serializers."""
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if hasattr(value, "to_dict"):
        return _plain(value.to_dict())
    return value


HELPERS = {
    "package_name": package_name,
    "to_yaml": to_yaml,
    "toYaml": to_yaml,
    "to_json": to_json,
    "toJson": to_json,
}


def _create_environment() -> Environment:
    env = Environment(
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )
    env.globals.update(HELPERS)
    env.filters.update(HELPERS)
    return env


_env = _create_environment()


def render(text: str, context: Mapping[str, Any], name: str = "<template>") -> str:
    """Render template text against context.

    Args:
        text: Template source
        context: Render context, usually from ``build_render_context``
        name: Template name used in error messages (file path or filename)

    Returns:
        Rendered text

    Raises:
        TemplateRenderError: On syntax errors or undefined values
    """
    try:
        template = _env.from_string(text)
    except TemplateSyntaxError as e:
        raise TemplateRenderError(name, e.message or str(e), e.lineno) from e

    try:
        return template.render(**context)
    except TemplateError as e:
        raise TemplateRenderError(name, str(e), _error_lineno(e)) from e


def _error_lineno(error: Exception):
    """Best-effort line number of a runtime template error."""
    tb = error.__traceback__
    lineno = None
    while tb is not None:
        if tb.tb_frame.f_code.co_filename == "<template>":
            lineno = tb.tb_lineno
        tb = tb.tb_next
    return lineno
