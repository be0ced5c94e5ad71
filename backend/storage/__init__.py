"""Process-wide storage and app configuration.

Data layout:
  data/
    games/              Authored worlds (see quest_loom.storage)
    playthroughs/       Per-run progress and current position
    config.json         App settings (oracle template, empty-state text)

Config: get_config() returns defaults merged with stored values.
update_config() applies partial updates; unknown keys are ignored.
"""

# Re-export all public symbols so `from backend import storage` keeps working.

from .core import (  # noqa: F401
    data_dir,
    get_storage,
    init_storage,
)

from .config import (  # noqa: F401
    DEFAULT_ORACLE_TEMPLATE,
    get_config,
    update_config,
)
