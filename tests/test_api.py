import json

import pytest
from fastapi.testclient import TestClient

from po_agent.api import Services, create_app
from po_agent.config import Settings
from po_agent.kernel import Kernel
from po_agent.tools.classify_intent import ClassifyIntentTool

from conftest import ScriptedPromptService, ScriptedPurchaseOrderAgent, dummy_llm_config, final, tool_call

REPLY = json.dumps({
    "reflection": "User wants a laptop",
    "nextStep": "Validate the product",
    "userPrompt": "Which laptop would you like?",
    "products": [{"sku": "DELL-XPS13"}],
})


def make_settings(**overrides):
    values = dict(
        azure_openai_endpoint="https://example.openai.azure.com",
        azure_openai_chat_deployment="gpt",
        azure_openai_api_version="2024-12-01-preview",
        product_catalog_path="",
        session_cookie_name="SessionId",
        max_tool_rounds=8,
        default_debug=False,
        log_dir="logs",
        log_level="INFO",
        api_host="127.0.0.1",
        api_port=8000,
        api_base_url="http://testserver",
    )
    values.update(overrides)
    return Settings(**values)


def make_client(logger, state_store, replies, prompt_replies=(), **settings):
    service = ScriptedPromptService(prompt_replies=list(prompt_replies))
    kernel = Kernel(service)
    kernel.add_plugin(ClassifyIntentTool(logger))
    agent = ScriptedPurchaseOrderAgent(kernel, state_store, logger, dummy_llm_config(), replies=replies)
    services = Services(settings=make_settings(**settings), logger=logger, agent=agent, state_store=state_store)
    return TestClient(create_app(services))


def test_health_check(logger, state_store):
    resp = make_client(logger, state_store, []).get("/PurchaseOrderRequest")
    assert resp.status_code == 200
    assert resp.text == "OK"


@pytest.mark.parametrize("body", ["", "   ", {"prompt": ""}, {"other": "x"}])
def test_empty_prompt_is_rejected(logger, state_store, body):
    resp = make_client(logger, state_store, []).post("/PurchaseOrderRequest/ProcessPurchaseRequest", json=body)
    assert resp.status_code == 400
    assert resp.text == "Prompt cannot be empty or null."


def test_new_session_sets_cookie_and_hides_debug(logger, state_store):
    client = make_client(logger, state_store, [final(REPLY)])
    resp = client.post("/PurchaseOrderRequest/ProcessPurchaseRequest", json="I need a laptop")

    assert resp.status_code == 200
    assert resp.json() == {
        "reflection": "User wants a laptop",
        "userPrompt": "Which laptop would you like?",
        "products": [{"sku": "DELL-XPS13"}],
    }
    session_id = resp.cookies.get("SessionId")
    assert session_id
    cookie_header = resp.headers["set-cookie"].lower()
    assert "httponly" in cookie_header
    assert "samesite=lax" in cookie_header
    assert state_store.get_chat_history(session_id) is not None


def test_debug_header_adds_tool_steps(logger, state_store):
    client = make_client(
        logger,
        state_store,
        [
            tool_call("ClassifyIntentTool-determine_intent", '{"user_prompt_input": "laptop"}', call_id="c1"),
            final(REPLY),
        ],
        prompt_replies=['{"intent": "RequestPurchase", "confidence": 0.9}'],
    )
    resp = client.post(
        "/PurchaseOrderRequest/ProcessPurchaseRequest",
        json={"prompt": "laptop"},
        headers={"showdebug": "true"},
    )
    body = resp.json()
    assert body["nextStep"] == "Validate the product"
    debug = body["debugInfo"]
    assert debug["sessionId"] == resp.cookies.get("SessionId")
    assert [s["toolName"] for s in debug["toolSteps"]] == ["determine_intent"]
    assert json.loads(debug["toolSteps"][0]["jsonResult"])["intent"] == "RequestPurchase"
    assert debug["toolSteps"][0]["agentResponse"] == REPLY
    assert debug["memory"]["intent"]["intent"] == "RequestPurchase"
    assert [m["role"] for m in debug["history"]] == ["system", "user", "assistant", "tool", "assistant"]
    assert any(t.startswith("[TOOL_CALL]") for t in debug["telemetry"])


def test_default_debug_setting_applies_without_header(logger, state_store):
    client = make_client(logger, state_store, [final(REPLY)], default_debug=True)
    body = client.post("/PurchaseOrderRequest/ProcessPurchaseRequest", json="laptop").json()
    assert "debugInfo" in body
    assert body["debugInfo"]["toolSteps"] == []


def test_existing_session_cookie_is_reused(logger, state_store):
    client = make_client(logger, state_store, [final(REPLY), final(REPLY)])
    first = client.post("/PurchaseOrderRequest/ProcessPurchaseRequest", json="one")
    sid = first.cookies.get("SessionId")
    second = client.post("/PurchaseOrderRequest/ProcessPurchaseRequest", json="two", headers={"showdebug": "true"})
    assert second.json()["debugInfo"]["sessionId"] == sid
    assert len(state_store.get_chat_history(sid)) == 4


def test_clear_session(logger, state_store):
    client = make_client(logger, state_store, [final(REPLY)])
    sid = client.post("/PurchaseOrderRequest/ProcessPurchaseRequest", json="one").cookies.get("SessionId")
    resp = client.delete("/PurchaseOrderRequest/Session")
    assert resp.json() == {"sessionId": sid, "cleared": True}
    assert state_store.get_chat_history(sid) is None


def test_agent_failure_still_returns_a_reply(logger, state_store):
    client = make_client(logger, state_store, [RuntimeError("model offline")])
    body = client.post("/PurchaseOrderRequest/ProcessPurchaseRequest", json="laptop").json()
    assert body["reflection"].endswith("model offline")
    assert body["userPrompt"] is None
