"""In-memory session registry: one ScriptController per browser session.

Sessions are memory-only and never written to disk. A session that has not
been touched for `idle_ttl` seconds is dropped the next time one is created,
and past `max_sessions` the least recently used session goes first.
Background operations (wait=false on the generate/translate routes) are
tracked here so they are not garbage-collected mid-flight and can be
cancelled when their session is deleted.
"""

import asyncio
import logging
import time
import uuid
from collections.abc import Callable, Coroutine
from typing import Any

from skit_studio.client import GenerationClient
from skit_studio.controller import ScriptController
from skit_studio.llm import from_connection
from skit_studio.models import Language

logger = logging.getLogger(__name__)


def build_client(config: dict[str, Any]) -> GenerationClient:
    """Build a generation client from the app settings."""
    prompts = config.get("prompts", {})
    return GenerationClient(
        from_connection(config["llm_connection"]),
        generate_template=prompts.get("generate") or None,
        translate_template=prompts.get("translate") or None,
    )


class Session:
    def __init__(self, session_id: str, controller: ScriptController) -> None:
        self.id = session_id
        self.controller = controller
        self.tasks: set[asyncio.Task] = set()
        self.last_seen = 0.0

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Run an operation in the background, keeping a reference until done."""
        task = asyncio.create_task(coro)
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)
        return task

    def view(self) -> dict[str, Any]:
        return {"id": self.id, "state": self.controller.snapshot()}


class SessionRegistry:
    def __init__(
        self,
        max_sessions: int = 200,
        idle_ttl: float = 6 * 60 * 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_sessions = max_sessions
        self.idle_ttl = idle_ttl
        self._clock = clock
        self._sessions: dict[str, Session] = {}

    def create(self, config: dict[str, Any]) -> Session:
        language = Language(config["default_language"])
        controller = ScriptController(build_client(config), language=language)
        self._evict()
        session = Session(uuid.uuid4().hex, controller)
        session.last_seen = self._clock()
        self._sessions[session.id] = session
        logger.info("session created id=%s", session.id)
        return session

    def get(self, session_id: str) -> Session | None:
        session = self._sessions.get(session_id)
        if session is not None:
            session.last_seen = self._clock()
        return session

    def _evict(self) -> None:
        """Drop idle sessions, then the oldest ones until there is room for one more."""
        now = self._clock()
        for session in list(self._sessions.values()):
            if now - session.last_seen > self.idle_ttl and not session.tasks:
                logger.info("session expired id=%s", session.id)
                self.delete(session.id)
        by_age = sorted(self._sessions.values(), key=lambda s: s.last_seen)
        for session in by_age[: max(0, len(by_age) - self.max_sessions + 1)]:
            logger.info("session evicted id=%s", session.id)
            self.delete(session.id)

    def delete(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        for task in list(session.tasks):
            task.cancel()
        logger.info("session deleted id=%s", session_id)
        return True

    def clear(self) -> None:
        for session_id in list(self._sessions):
            self.delete(session_id)

    def __len__(self) -> int:
        return len(self._sessions)


registry = SessionRegistry()
