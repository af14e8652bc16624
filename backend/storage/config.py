"""Global app configuration (LLM connection, default language, prompt overrides).

Environment variables (loaded from .env by backend.app) seed the connection
defaults; values stored in config.json win over them.
"""

import json
import os
from pathlib import Path
from typing import Any

from skit_studio.llm import PROVIDER_FORMATS
from skit_studio.models import DEFAULT_LANGUAGE, Language

from .core import data_dir


def _connection_defaults() -> dict[str, Any]:
    return {
        "name": os.getenv("LLM_CONNECTION_NAME", "default"),
        "provider_url": os.getenv("LLM_PROVIDER_URL", ""),
        "api_key": os.getenv("LLM_API_KEY", ""),
        "provider_format": os.getenv("LLM_PROVIDER_FORMAT", "koboldcpp"),
        "model": os.getenv("LLM_MODEL", ""),
    }


_PROMPT_DEFAULTS: dict[str, str] = {
    "generate": "",
    "translate": "",
}


def _config_path() -> Path:
    return data_dir() / "config.json"


def _valid_language(value: Any) -> str | None:
    try:
        return Language(value).value
    except ValueError:
        return None


def _check_connection(connection: dict[str, Any]) -> None:
    """Raise ValueError for connection values from_connection() would reject."""
    provider_format = connection.get("provider_format") or "koboldcpp"
    if provider_format not in PROVIDER_FORMATS:
        raise ValueError(f"Unknown provider format: {provider_format!r}")
    if "timeout" in connection:
        try:
            timeout = float(connection["timeout"])
        except (TypeError, ValueError):
            raise ValueError(f"Invalid timeout: {connection['timeout']!r}")
        if timeout <= 0:
            raise ValueError(f"Invalid timeout: {connection['timeout']!r}")


def get_config() -> dict[str, Any]:
    """Read config, returning defaults merged with stored values."""
    config: dict[str, Any] = {
        "llm_connection": _connection_defaults(),
        "default_language": DEFAULT_LANGUAGE.value,
        "prompts": dict(_PROMPT_DEFAULTS),
    }
    path = _config_path()
    if path.is_file():
        stored = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(stored.get("llm_connection"), dict):
            config["llm_connection"].update(stored["llm_connection"])
        if "default_language" in stored:
            # Unknown values (e.g. a language that was removed) fall back to the default
            config["default_language"] = (
                _valid_language(stored["default_language"]) or config["default_language"]
            )
        if isinstance(stored.get("prompts"), dict):
            for key, value in stored["prompts"].items():
                if key in config["prompts"]:
                    config["prompts"][key] = value
    return config


def update_config(fields: dict[str, Any]) -> dict[str, Any]:
    """Merge fields into config and persist. Returns full config.

    Raises ValueError for an unknown default_language or an invalid
    provider_format / timeout; nothing is written in that case.
    """
    config = get_config()
    if isinstance(fields.get("llm_connection"), dict):
        connection = {**config["llm_connection"], **fields["llm_connection"]}
        _check_connection(connection)
        config["llm_connection"] = connection
    if "default_language" in fields:
        language = _valid_language(fields["default_language"])
        if language is None:
            raise ValueError(f"Unknown language: {fields['default_language']!r}")
        config["default_language"] = language
    if isinstance(fields.get("prompts"), dict):
        for key, value in fields["prompts"].items():
            if key in config["prompts"]:
                config["prompts"][key] = value
    _config_path().write_text(json.dumps(config, indent=2, ensure_ascii=False), encoding="utf-8")
    return config


def has_connection(config: dict[str, Any]) -> bool:
    """True when an LLM provider URL is configured."""
    return bool(config["llm_connection"].get("provider_url"))
