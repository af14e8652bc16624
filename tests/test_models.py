"""Tests for skit_studio.models."""

import pytest
from pydantic import ValidationError

from skit_studio.models import DEFAULT_LANGUAGE, AppState, Dialogue, Language, Script

from stubs import CAT_PIZZA


class TestLanguage:
    def test_closed_set(self) -> None:
        assert [lang.value for lang in Language] == ["Bangla", "Hindi", "Hinglish"]

    def test_default_is_hinglish(self) -> None:
        assert DEFAULT_LANGUAGE is Language.Hinglish

    def test_unknown_value_rejected(self) -> None:
        with pytest.raises(ValueError):
            Language("Klingon")


class TestScript:
    def test_parses_wire_names(self) -> None:
        s = Script.model_validate(CAT_PIZZA)
        assert s.title == "Billi Ka Pizza Order"
        assert s.scene_setup.startswith("Late night")
        assert len(s.dialogue) == 2
        assert s.dialogue[1] == Dialogue(character="Mittens", line="Meow. Extra cheese, no olives. I have standards.")

    def test_python_names_accepted(self) -> None:
        s = Script(
            title="T", characters="A, B", scene_setup="Somewhere.",
            dialogue=[Dialogue(character="A", line="Hi")], punchline="Bye",
        )
        assert s.dialogue[0].character == "A"

    def test_to_wire_uses_camel_case(self) -> None:
        wire = Script.model_validate(CAT_PIZZA).to_wire()
        assert wire == CAT_PIZZA

    def test_empty_dialogue_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Script.model_validate({**CAT_PIZZA, "script": []})

    def test_empty_title_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Script.model_validate({**CAT_PIZZA, "title": ""})

    def test_missing_punchline_rejected(self) -> None:
        data = dict(CAT_PIZZA)
        del data["punchline"]
        with pytest.raises(ValidationError):
            Script.model_validate(data)

    def test_immutable(self) -> None:
        s = Script.model_validate(CAT_PIZZA)
        with pytest.raises(ValidationError):
            s.title = "Changed"


class TestAppState:
    def test_defaults(self) -> None:
        state = AppState()
        assert state.topic == ""
        assert state.language is Language.Hinglish
        assert state.current_script is None
        assert state.script_language is None
        assert state.translation_cache == {}
        assert state.pending_generate is False
        assert state.pending_translate == {}
        assert state.last_error is None

    def test_default_containers_not_shared(self) -> None:
        a, b = AppState(), AppState()
        a.pending_translate[Language.Hindi] = True
        assert b.pending_translate == {}
