"""Core domain models.

The controller, the generation client and the HTTP layer all operate on
these types. Pydantic is used for validation and serialisation at every data
boundary. Scripts keep the camelCase wire names the generation prompt asks
for (`sceneSetup`, `script`) while Python code uses snake_case.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Language(str, Enum):
    """Closed set of language styles a script can be written in."""

    Bangla = "Bangla"
    Hindi = "Hindi"
    Hinglish = "Hinglish"


DEFAULT_LANGUAGE = Language.Hinglish


class Dialogue(BaseModel):
    """One spoken line."""

    model_config = ConfigDict(frozen=True)

    character: str
    line: str


class Script(BaseModel):
    """A generated comedic dialogue script. Replaced wholesale, never edited."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = Field(min_length=1)
    characters: str
    scene_setup: str = Field(alias="sceneSetup")
    dialogue: tuple[Dialogue, ...] = Field(alias="script", min_length=1)
    punchline: str

    def to_wire(self) -> dict:
        """Dump using the wire field names."""
        return self.model_dump(mode="json", by_alias=True)


class AppState(BaseModel):
    """Everything the presentation layer renders from.

    Owned by a single ScriptController; the rendering side only reads it.
    """

    topic: str = ""
    language: Language = DEFAULT_LANGUAGE
    current_script: Script | None = None
    script_language: Language | None = None  # language current_script was generated in
    translation_cache: dict[Language, Script] = Field(default_factory=dict)
    pending_generate: bool = False
    pending_translate: dict[Language, bool] = Field(default_factory=dict)
    last_error: str | None = None
