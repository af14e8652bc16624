"""FastMCP server exposing script generation and translation as MCP tools.

Tools:
  - generate_script(topic, language)  — generate a new script, returns the state
  - translate_script(language)        — translate the current script, returns the state
  - get_state()                       — current state without doing anything

All tools share one in-process ScriptController, replaced via
set_controller() for tests, or built from data/config.json when run as
__main__.

Usage:
    uv run python -m backend.mcp_server
"""

from typing import Any

from mcp.server.fastmcp import FastMCP

from skit_studio.controller import ScriptController

mcp = FastMCP("skit-studio")

_controller: ScriptController | None = None


def set_controller(controller: ScriptController) -> None:
    """Replace the active controller (used in tests)."""
    global _controller
    _controller = controller


def get_controller() -> ScriptController:
    """Return the active controller."""
    assert _controller is not None, "Call set_controller() before using the MCP tools"
    return _controller


@mcp.tool()
async def generate_script(topic: str, language: str = "Hinglish") -> dict[str, Any]:
    """Generate a short comedic dialogue script about a topic.

    language is one of Bangla, Hindi, Hinglish.
    """
    controller = get_controller()
    controller.set_language(language)
    await controller.generate(topic)
    return controller.snapshot()


@mcp.tool()
async def translate_script(language: str) -> dict[str, Any]:
    """Translate the current script into Bangla, Hindi or Hinglish."""
    controller = get_controller()
    await controller.translate(language)
    return controller.snapshot()


@mcp.tool()
def get_state() -> dict[str, Any]:
    """Current topic, language, script, translations and last error."""
    return get_controller().snapshot()


if __name__ == "__main__":
    import os
    from pathlib import Path

    from backend import storage
    from backend.sessions import build_client
    from skit_studio.models import Language

    data_path = Path(os.path.join(os.path.dirname(__file__), "..", "data"))
    storage.init_storage(Path(os.getenv("DATA_DIR", str(data_path))))
    config = storage.get_config()
    set_controller(ScriptController(build_client(config), Language(config["default_language"])))
    mcp.run()
