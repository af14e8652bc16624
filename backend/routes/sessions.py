"""Session endpoints: create/read/delete, user input, generate and translate.

Generate and translate never fail on AI errors; the outcome is in the
returned state (`last_error`, `current_script`, `translation_cache`).
"""

import asyncio

from fastapi import APIRouter, HTTPException

from backend import storage
from backend.sessions import Session, build_client, registry

from .models import GenerateBody, TranslateBody, UpdateSession

router = APIRouter()


def _get_session(session_id: str) -> Session:
    session = registry.get(session_id)
    if not session:
        raise HTTPException(404, "Session not found")
    return session


def _refresh_client(session: Session) -> None:
    """Point the session at the current LLM settings before an AI call."""
    config = storage.get_config()
    if not storage.has_connection(config):
        raise HTTPException(409, "No LLM connection configured — set one in Settings")
    try:
        session.controller.client = build_client(config)
    except ValueError as e:
        raise HTTPException(409, str(e))


@router.post("/sessions")
async def create_session():
    """Start a new session with default state."""
    try:
        session = registry.create(storage.get_config())
    except ValueError as e:
        raise HTTPException(409, f"Invalid LLM connection settings: {e}")
    return session.view()


@router.get("/sessions/{session_id}")
async def get_session(session_id: str):
    """Current state of a session (poll this while operations are pending)."""
    return _get_session(session_id).view()


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str):
    """Drop a session and cancel its background operations."""
    if not registry.delete(session_id):
        raise HTTPException(404, "Session not found")
    return {"ok": True}


@router.patch("/sessions/{session_id}")
async def update_session(session_id: str, body: UpdateSession):
    """Update user input (topic, language)."""
    session = _get_session(session_id)
    if body.topic is not None:
        session.controller.set_topic(body.topic)
    if body.language is not None:
        session.controller.set_language(body.language)
    return session.view()


@router.post("/sessions/{session_id}/generate")
async def generate(session_id: str, body: GenerateBody):
    """Generate a script for the session's topic and language."""
    session = _get_session(session_id)
    _refresh_client(session)
    if body.wait:
        await session.controller.generate(body.topic)
    else:
        session.spawn(session.controller.generate(body.topic))
        await asyncio.sleep(0)  # let the task set its pending flag
    return session.view()


@router.post("/sessions/{session_id}/translate")
async def translate(session_id: str, body: TranslateBody):
    """Translate the session's current script into another language."""
    session = _get_session(session_id)
    _refresh_client(session)
    if body.wait:
        await session.controller.translate(body.language)
    else:
        session.spawn(session.controller.translate(body.language))
        await asyncio.sleep(0)
    return session.view()


@router.post("/sessions/{session_id}/reset")
async def reset_session(session_id: str):
    """Clear the session back to its initial state."""
    session = _get_session(session_id)
    session.controller.reset()
    return session.view()
