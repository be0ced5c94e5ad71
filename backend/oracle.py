"""Handlebars rendering of the next-steps list ("the oracle")."""

from collections.abc import Callable
from typing import Any

import pybars

from quest_loom.progression import ActionableEntity

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class OracleError(Exception):
    """Raised when an oracle template fails to compile or render."""


# ── Custom Handlebars helpers ────────────────────────────


def _helper_take(this, options, items, count):
    """{{#take steps N}}...{{/take}}: iterate over the first N steps."""
    result = []
    for item in list(items)[:int(count)]:
        result.extend(options["fn"](item))
    return result


def _helper_kind(this, options, items, kind):
    """{{#kind steps "quest"}}...{{/kind}}: iterate over steps of one entity kind."""
    result = []
    for item in items:
        if item.get("entity_type") == kind:
            result.extend(options["fn"](item))
    return result


_HELPERS: dict[str, Callable] = {
    "take": _helper_take,
    "kind": _helper_kind,
}


def render_oracle(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return compiled(context, helpers=_HELPERS)
    except Exception as e:
        raise OracleError(f"Template error: {e}") from e


def build_oracle_context(
    steps: list[ActionableEntity],
    position_name: str = "",
    reachable_names: list[str] | None = None,
    empty_text: str = "",
) -> dict[str, Any]:
    """Assemble template variables for the oracle template."""
    return {
        "steps": [s.model_dump() for s in steps],
        "count": len(steps),
        "position": position_name,
        "reachable": reachable_names or [],
        "empty_text": empty_text,
    }
