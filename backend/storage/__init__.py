"""File-based JSON storage for app settings.

Data layout:
  data/
    config.json          App settings (LLM connection, default language, prompt overrides)

Session state (topic, scripts, translations) is never written here; it lives
in memory for the lifetime of a session.

Config: get_config() returns defaults merged with stored values.
update_config() applies partial updates — llm_connection and prompts are
merged key-by-key, scalars overwritten.
"""

# Re-export all public symbols so `from backend import storage` keeps working.

from .core import (  # noqa: F401
    data_dir,
    init_storage,
)

from .config import (  # noqa: F401
    get_config,
    has_connection,
    update_config,
)
