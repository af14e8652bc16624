"""Health check, settings, languages and connection check endpoints."""

import logging

import httpx
from fastapi import APIRouter, HTTPException

from backend import storage
from skit_studio.models import DEFAULT_LANGUAGE, Language

from .models import CheckConnectionBody

logger = logging.getLogger(__name__)

router = APIRouter()

_CHECK_PATHS = {
    "koboldcpp": "/api/v1/model",
    "openai": "/v1/models",
    "gemini": "/v1beta/models",
}


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/languages")
async def languages():
    """The closed set of script languages."""
    return {
        "languages": [lang.value for lang in Language],
        "default": DEFAULT_LANGUAGE.value,
    }


@router.post("/check-connection")
async def check_connection(body: CheckConnectionBody):
    """Quick health check against an LLM provider URL."""
    url = f"{body.provider_url.rstrip('/')}{_CHECK_PATHS[body.provider_format]}"
    headers: dict[str, str] = {}
    if body.api_key:
        if body.provider_format == "gemini":
            headers["x-goog-api-key"] = body.api_key
        else:
            headers["Authorization"] = f"Bearer {body.api_key}"
    try:
        async with httpx.AsyncClient(timeout=5) as client:
            resp = await client.get(url, headers=headers)
            resp.raise_for_status()
        return {"ok": True}
    except httpx.HTTPError as e:
        logger.info("connection check failed url=%s: %s", url, e)
        return {"ok": False}


@router.get("/settings")
async def get_settings():
    """Get global app settings (LLM connection, default language, prompts)."""
    return storage.get_config()


@router.patch("/settings")
async def update_settings(body: dict):
    """Update global app settings (partial merge)."""
    try:
        return storage.update_config(body)
    except ValueError as e:
        raise HTTPException(400, str(e))
