"""Tests for config storage: defaults, env seeding, partial merges."""

import json

import pytest

from backend import storage


def test_get_config_empty():
    """Returns defaults when no config file exists."""
    config = storage.get_config()
    assert config["llm_connection"]["provider_url"] == ""
    assert config["llm_connection"]["provider_format"] == "koboldcpp"
    assert config["default_language"] == "Hinglish"
    assert config["prompts"] == {"generate": "", "translate": ""}
    assert not storage.has_connection(config)


def test_env_seeds_connection(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER_URL", "https://generativelanguage.googleapis.com")
    monkeypatch.setenv("LLM_PROVIDER_FORMAT", "gemini")
    monkeypatch.setenv("LLM_API_KEY", "k")

    config = storage.get_config()

    assert config["llm_connection"]["provider_format"] == "gemini"
    assert config["llm_connection"]["api_key"] == "k"
    assert storage.has_connection(config)


def test_stored_connection_wins_over_env(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER_URL", "http://from-env")
    storage.update_config({"llm_connection": {"provider_url": "http://stored"}})

    assert storage.get_config()["llm_connection"]["provider_url"] == "http://stored"


def test_update_connection_merges_keys():
    """Partial connection update preserves other keys and persists."""
    storage.update_config({"llm_connection": {"provider_url": "http://localhost:5001"}})
    storage.update_config({"llm_connection": {"model": "mistral-7b"}})

    conn = storage.get_config()["llm_connection"]
    assert conn["provider_url"] == "http://localhost:5001"
    assert conn["model"] == "mistral-7b"


def test_update_default_language():
    result = storage.update_config({"default_language": "Bangla"})
    assert result["default_language"] == "Bangla"
    assert storage.get_config()["default_language"] == "Bangla"


def test_update_rejects_unknown_language():
    with pytest.raises(ValueError, match="Unknown language"):
        storage.update_config({"default_language": "Klingon"})
    assert storage.get_config()["default_language"] == "Hinglish"


def test_prompt_overrides_merge_and_ignore_unknown_keys():
    storage.update_config({"prompts": {"generate": "Joke about {{{topic}}}"}})
    storage.update_config({"prompts": {"translate": "Translate {{{script_json}}}", "other": "x"}})

    prompts = storage.get_config()["prompts"]
    assert prompts == {
        "generate": "Joke about {{{topic}}}",
        "translate": "Translate {{{script_json}}}",
    }


def test_stored_unknown_language_falls_back():
    """A hand-edited config with a bad language does not break reads."""
    (storage.data_dir() / "config.json").write_text(json.dumps({"default_language": "Marathi"}))

    assert storage.get_config()["default_language"] == "Hinglish"


def test_config_file_keeps_unicode_readable():
    storage.update_config({"prompts": {"generate": "मज़ेदार {{{topic}}}"}})

    raw = (storage.data_dir() / "config.json").read_text(encoding="utf-8")
    assert "मज़ेदार" in raw


def test_update_rejects_unknown_provider_format():
    storage.update_config({"llm_connection": {"provider_url": "http://localhost:5001"}})

    with pytest.raises(ValueError, match="Unknown provider format"):
        storage.update_config({"llm_connection": {"provider_format": "ollama"}})

    conn = storage.get_config()["llm_connection"]
    assert conn["provider_format"] == "koboldcpp"
    assert conn["provider_url"] == "http://localhost:5001"


@pytest.mark.parametrize("timeout", ["soon", None, 0, -5])
def test_update_rejects_bad_timeout(timeout):
    with pytest.raises(ValueError, match="Invalid timeout"):
        storage.update_config({"llm_connection": {"timeout": timeout}})
    assert "timeout" not in storage.get_config()["llm_connection"]


def test_update_accepts_numeric_timeout_string():
    storage.update_config({"llm_connection": {"timeout": "30"}})
    assert storage.get_config()["llm_connection"]["timeout"] == "30"
