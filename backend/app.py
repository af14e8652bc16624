import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from backend import storage
from backend.routes import router
from backend.sessions import registry

load_dotenv(Path(__file__).parent.parent / ".env")

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"
DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Sessions are memory-only; cancel whatever is still running on the way out
    if len(registry):
        logger.info("shutting down, dropping %d session(s)", len(registry))
    registry.clear()


def create_app(data_dir: Path | None = None) -> FastAPI:
    """Build the Skit Studio app with its settings stored under data_dir."""
    resolved = data_dir or Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR)))
    storage.init_storage(resolved)

    app = FastAPI(title="Skit Studio", lifespan=lifespan)
    app.include_router(router, prefix="/api")

    if STATIC_DIR.exists() and not os.getenv("VITE_DEV", ""):
        app.mount("/assets", StaticFiles(directory=STATIC_DIR / "assets"), name="assets")

        # Anything that is not /api or /assets is a front-end route
        @app.get("/{path:path}")
        async def index(path: str):
            return FileResponse(STATIC_DIR / "index.html")

    return app


# Default app instance for uvicorn (uses DATA_DIR env var or default)
app = create_app()
