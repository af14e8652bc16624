"""MCP tool tests through the FastMCP in-process client session."""

import json

import pytest
from mcp.shared.memory import create_connected_server_and_client_session

import backend.mcp_server as mcp_server
from skit_studio.client import GenerationClient
from skit_studio.controller import ScriptController
from skit_studio.llm import LLMError

from stubs import CAT_PIZZA, CAT_PIZZA_BANGLA, StubLLM, as_json


def _install(responses: dict[str, list]) -> StubLLM:
    llm = StubLLM(responses)
    mcp_server.set_controller(ScriptController(GenerationClient(llm)))
    return llm


def _payload(result) -> dict:
    assert not result.isError
    return json.loads(result.content[0].text)


@pytest.mark.asyncio
async def test_generate_then_translate():
    llm = _install({"generate": [as_json(CAT_PIZZA)], "translate": [as_json(CAT_PIZZA_BANGLA)]})

    async with create_connected_server_and_client_session(mcp_server.mcp._mcp_server) as client:
        generated = _payload(await client.call_tool(
            "generate_script", {"topic": "a cat who orders pizza", "language": "Hinglish"},
        ))
        translated = _payload(await client.call_tool("translate_script", {"language": "Bangla"}))

    assert generated["current_script"] == CAT_PIZZA
    assert translated["translation_cache"] == {"Bangla": CAT_PIZZA_BANGLA}
    assert [stage for stage, _ in llm.calls] == ["generate", "translate"]


@pytest.mark.asyncio
async def test_failure_is_reported_not_raised():
    _install({"generate": [LLMError("down")]})

    async with create_connected_server_and_client_session(mcp_server.mcp._mcp_server) as client:
        state = _payload(await client.call_tool("generate_script", {"topic": "x"}))

    assert state["current_script"] is None
    assert state["last_error"].startswith("Failed to generate script")


@pytest.mark.asyncio
async def test_get_state_reflects_controller():
    _install({})
    mcp_server.get_controller().set_topic("auto rickshaw meter")

    async with create_connected_server_and_client_session(mcp_server.mcp._mcp_server) as client:
        state = _payload(await client.call_tool("get_state", {}))

    assert state["topic"] == "auto rickshaw meter"


@pytest.mark.asyncio
async def test_tools_callable_directly():
    _install({"generate": [as_json(CAT_PIZZA)]})

    state = await mcp_server.generate_script("a cat who orders pizza", "Hindi")

    assert state["language"] == "Hindi"
    assert state["script_language"] == "Hindi"


def test_get_controller_requires_setup():
    mcp_server.set_controller(None)
    with pytest.raises(AssertionError):
        mcp_server.get_controller()
