"""FastAPI API endpoints under /api.

Endpoint groups: settings (health, languages, settings, check-connection)
and sessions. Everything a browser tab does goes through its session:
/api/sessions/{id} for state and user input, /generate and /translate for
the two AI operations.
"""

from fastapi import APIRouter

from .sessions import router as sessions_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(sessions_router)
