"""Tests for the oracle: Handlebars rendering of next steps, custom helpers
(take, kind), context building and error handling."""

import pytest

from backend.oracle import OracleError, build_oracle_context, render_oracle
from backend.storage import DEFAULT_ORACLE_TEMPLATE
from quest_loom.progression import ActionableEntity


def _step(entity_type="item", label="Rope", action="Acquire item", **fields):
    return ActionableEntity(
        entity_id=f"{entity_type}:1", entity_type=entity_type,
        label=label, action_label=action, **fields,
    )


# ── render_oracle ────────────────────────────────────────────


def test_render_simple_variable():
    assert render_oracle("You stand in {{position}}.", {"position": "Harbor"}) == "You stand in Harbor."


def test_render_invalid_template():
    with pytest.raises(OracleError):
        render_oracle("{{> missing_partial}}", {})


def test_take_helper_limits_steps():
    ctx = {"steps": [{"label": "a"}, {"label": "b"}, {"label": "c"}]}
    assert render_oracle("{{#take steps 2}}{{label}};{{/take}}", ctx) == "a;b;"


def test_kind_helper_filters_by_entity_type():
    ctx = build_oracle_context([
        _step("quest", "Q", "Start quest"),
        _step("item", "Rope", "Acquire item"),
        _step("quest", "R", "Start quest"),
    ])
    assert render_oracle('{{#kind steps "quest"}}{{label}} {{/kind}}', ctx) == "Q R "


# ── default template ─────────────────────────────────────────


def test_default_template_lists_steps():
    ctx = build_oracle_context([
        _step("quest", "The Keeper's Request", "Complete objective: Light the lamp", objective_index=1),
        _step("item", "Coil of Rope", "Acquire item"),
    ])
    assert render_oracle(DEFAULT_ORACLE_TEMPLATE, ctx) == (
        "- Complete objective: Light the lamp (The Keeper's Request)\n"
        "- Acquire item (Coil of Rope)\n"
    )


def test_default_template_empty_text():
    ctx = build_oracle_context([], empty_text="Nothing here.")
    assert render_oracle(DEFAULT_ORACLE_TEMPLATE, ctx) == "Nothing here."


# ── build_oracle_context ─────────────────────────────────────


def test_build_context():
    ctx = build_oracle_context(
        [_step(objective_index=None)], position_name="Harbor", reachable_names=["Harbor", "Market"],
    )
    assert ctx["count"] == 1
    assert ctx["position"] == "Harbor"
    assert ctx["reachable"] == ["Harbor", "Market"]
    assert ctx["steps"][0]["action_label"] == "Acquire item"
    assert ctx["steps"][0]["entity_type"] == "item"
    assert ctx["empty_text"] == ""


def test_build_context_defaults():
    ctx = build_oracle_context([])
    assert ctx["steps"] == []
    assert ctx["count"] == 0
    assert ctx["reachable"] == []
