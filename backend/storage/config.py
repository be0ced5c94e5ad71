"""Global app configuration (oracle template and display text)."""

import json
from pathlib import Path
from typing import Any

from .core import data_dir

DEFAULT_ORACLE_TEMPLATE = (
    "{{#if steps}}"
    "{{#each steps}}- {{{action_label}}} ({{{label}}})\n{{/each}}"
    "{{else}}{{{empty_text}}}{{/if}}"
)

_CONFIG_DEFAULTS: dict[str, Any] = {
    "oracle_template": DEFAULT_ORACLE_TEMPLATE,
    "oracle_empty_text": "Nothing to do from here. Try moving somewhere else.",
}


def _config_path() -> Path:
    return data_dir() / "config.json"


def get_config() -> dict[str, Any]:
    """Read config, returning defaults merged with stored values."""
    config = dict(_CONFIG_DEFAULTS)
    path = _config_path()
    if path.is_file():
        stored = json.loads(path.read_text())
        for key in _CONFIG_DEFAULTS:
            if key in stored:
                config[key] = stored[key]
    return config


def update_config(fields: dict[str, Any]) -> dict[str, Any]:
    """Merge known fields into config and persist. Returns full config."""
    config = get_config()
    for key, value in fields.items():
        if key in _CONFIG_DEFAULTS:
            config[key] = value
    _config_path().write_text(json.dumps(config, indent=2))
    return config
