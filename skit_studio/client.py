"""Generation client — turns a topic or a script into a new Script via an LLM.

    generate(topic, language)        → Script   (raises GenerationError)
    translate(script, target)        → Script   (raises TranslationError)

Both operations render a Handlebars prompt, call the injected LLM callable
with the stage name ("generate" / "translate"), strip markdown fences from
the reply, and validate it into a Script. Every failure along the way is
re-raised as the operation's error type with the original exception chained,
so callers only ever catch one thing per operation.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from skit_studio.llm import LLM
from skit_studio.models import Language, Script
from skit_studio.prompts import (
    DEFAULT_GENERATE_PROMPT,
    DEFAULT_TRANSLATE_PROMPT,
    generate_context,
    render_prompt,
    translate_context,
)

logger = logging.getLogger(__name__)


class ScriptError(Exception):
    """Base class for generation client failures."""


class GenerationError(ScriptError):
    """The generate call failed (network, quota, malformed response...)."""


class TranslationError(ScriptError):
    """A translate call failed."""

    def __init__(self, language: Language, message: str) -> None:
        super().__init__(message)
        self.language = language


class MalformedScriptError(ValueError):
    """LLM output could not be turned into a Script."""


def _strip_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = [l for l in lines[1:] if not l.strip().startswith("```")]
        cleaned = "\n".join(lines)
    return cleaned


def parse_script(text: str) -> Script:
    """Parse LLM output into a Script, stripping markdown fences."""
    cleaned = _strip_fences(text)
    try:
        data: Any = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning("LLM output is not valid JSON: %s", e)
        raise MalformedScriptError(f"Output is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedScriptError(
            f"Script must be a JSON object, got {type(data).__name__}"
        )
    try:
        return Script.model_validate(data)
    except ValidationError as e:
        logger.warning("LLM output does not match the script shape: %s", e)
        raise MalformedScriptError("Output does not match the script shape") from e


class GenerationClient:
    """Async generate/translate pair backed by an LLM callable.

    Args:
        llm:                Any object matching the LLM protocol.
        generate_template:  Handlebars override for the generate prompt.
        translate_template: Handlebars override for the translate prompt.
    """

    def __init__(
        self,
        llm: LLM,
        generate_template: str | None = None,
        translate_template: str | None = None,
    ) -> None:
        self._llm = llm
        self._generate_template = generate_template or DEFAULT_GENERATE_PROMPT
        self._translate_template = translate_template or DEFAULT_TRANSLATE_PROMPT

    async def generate(self, topic: str, language: Language) -> Script:
        try:
            prompt = render_prompt(self._generate_template, generate_context(topic, language))
            output = await self._llm("generate", prompt)
            return parse_script(output)
        except Exception as e:
            raise GenerationError(f"Could not generate a {language.value} script: {e}") from e

    async def translate(self, script: Script, target: Language) -> Script:
        try:
            prompt = render_prompt(self._translate_template, translate_context(script, target))
            output = await self._llm("translate", prompt)
            return parse_script(output)
        except Exception as e:
            raise TranslationError(
                target, f"Could not translate script to {target.value}: {e}"
            ) from e
