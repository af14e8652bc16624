"""View state controller — owns AppState and the two async write operations.

Request lifecycle, per logical key ("generate", or one key per translation
target):

    Idle → Pending → (Success | Failure) → Idle

The pending flag is set before the client is awaited and cleared in a
`finally`, so no exit path leaves it stuck. Every failure is caught here and
turned into `last_error`; nothing propagates to the caller.

Overlapping calls for the same key are sequenced: each call takes a ticket,
and a resolution whose ticket is no longer the newest for its key is
dropped without touching state. Translations also remember which script they
were started for and are dropped if a new generate began in the meantime, so
the translation cache only ever holds translations of the current script.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any

from skit_studio.client import GenerationClient
from skit_studio.models import DEFAULT_LANGUAGE, AppState, Language, Script

logger = logging.getLogger(__name__)

TOPIC_REQUIRED = "Please enter a topic for your script."
GENERATE_FAILED = "Failed to generate script. The AI might be having a moment. Please try again."
TRANSLATE_FAILED = "Failed to translate to {language}. Please try again."

_GENERATE_KEY = "generate"


def _translate_key(language: Language) -> str:
    return f"translate:{language.value}"


class ScriptController:
    """Single source of truth for one session's view state.

    The presentation layer reads `state` (or `snapshot()`) and calls
    set_topic / set_language / generate / translate. Nothing else writes.
    """

    def __init__(self, client: GenerationClient, language: Language = DEFAULT_LANGUAGE) -> None:
        self.client = client  # swapped by the backend when settings change
        self._default_language = Language(language)
        self.state = AppState(language=self._default_language)
        self._tickets = itertools.count(1)
        self._latest: dict[str, int] = {}
        self._epoch = 0  # bumped by every generate that passes validation

    # ------------------------------------------------------------------
    # Sequencing
    # ------------------------------------------------------------------

    def _issue(self, key: str) -> int:
        ticket = next(self._tickets)
        self._latest[key] = ticket
        return ticket

    def _is_latest(self, key: str, ticket: int) -> bool:
        return self._latest.get(key) == ticket

    # ------------------------------------------------------------------
    # User input
    # ------------------------------------------------------------------

    def set_topic(self, topic: str) -> None:
        self.state.topic = topic

    def set_language(self, language: Language | str) -> None:
        self.state.language = Language(language)

    def reset(self) -> None:
        """Back to a fresh session. In-flight calls resolve into the void."""
        self.state = AppState(language=self._default_language)
        self._latest.clear()
        self._epoch += 1

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def generate(self, topic: str | None = None) -> Script | None:
        """Generate a new script for the topic in the current language.

        Returns the new script, or None on validation error, failure, or when
        a newer generate superseded this one.
        """
        state = self.state
        if topic is not None:
            state.topic = topic
        topic = state.topic
        if not topic.strip():
            state.last_error = TOPIC_REQUIRED
            return None

        language = state.language
        ticket = self._issue(_GENERATE_KEY)
        self._epoch += 1
        state.last_error = None
        state.current_script = None
        state.script_language = None
        state.translation_cache = {}
        state.pending_generate = True

        try:
            script = await self.client.generate(topic, language)
        except Exception:
            logger.exception("generate failed topic=%r language=%s", topic, language.value)
            if self._is_latest(_GENERATE_KEY, ticket) and state is self.state:
                state.last_error = GENERATE_FAILED
            return None
        finally:
            if self._is_latest(_GENERATE_KEY, ticket) and state is self.state:
                state.pending_generate = False

        if not self._is_latest(_GENERATE_KEY, ticket) or state is not self.state:
            logger.info("discarding superseded generate result topic=%r", topic)
            return None
        # a blank-topic attempt made while this call was pending may have set an error
        state.last_error = None
        state.current_script = script
        state.script_language = language
        logger.debug("generated script title=%r lines=%d", script.title, len(script.dialogue))
        return script

    async def translate(self, target: Language | str) -> Script | None:
        """Translate the current script into `target` and cache the result.

        No-op when there is no script yet or when `target` is the language the
        script was written in.
        """
        state = self.state
        target = Language(target)
        script = state.current_script
        if script is None:
            return None
        if target == state.script_language:
            logger.debug("skipping translate to the script's own language %s", target.value)
            return None

        key = _translate_key(target)
        ticket = self._issue(key)
        epoch = self._epoch
        state.last_error = None
        state.pending_translate[target] = True

        def still_current() -> bool:
            return self._is_latest(key, ticket) and self._epoch == epoch and state is self.state

        try:
            translated = await self.client.translate(script, target)
        except Exception:
            logger.exception("translate failed language=%s", target.value)
            if still_current():
                state.last_error = TRANSLATE_FAILED.format(language=target.value)
            return None
        finally:
            if self._is_latest(key, ticket) and state is self.state:
                state.pending_translate[target] = False

        if not still_current():
            logger.info("discarding stale translation language=%s", target.value)
            return None
        state.translation_cache[target] = translated
        return translated

    # ------------------------------------------------------------------
    # Read surface
    # ------------------------------------------------------------------

    def is_translating(self, language: Language | str) -> bool:
        return self.state.pending_translate.get(Language(language), False)

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready copy of the state, scripts in their wire shape."""
        return self.state.model_dump(mode="json", by_alias=True)
