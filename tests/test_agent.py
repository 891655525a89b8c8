import json

from po_agent.agent import SYSTEM_PROMPT, UNEXPECTED_ERROR_PREFIX, history_dto, parse_agent_reply
from po_agent.kernel import Kernel
from po_agent.step_reducer import reduce_steps
from po_agent.telemetry import AgentNarrative, TelemetryCollector
from po_agent.tools.classify_intent import ClassifyIntentTool

from conftest import ScriptedPromptService, ScriptedPurchaseOrderAgent, dummy_llm_config, final, tool_call

FINAL = json.dumps({"reflection": "Intent is a purchase", "nextStep": "validate", "userPrompt": "Which model?"})
CLASSIFY = "ClassifyIntentTool-determine_intent"


def build_agent(replies, state_store, logger, prompt_replies=(), rounds=8):
    kernel = Kernel(ScriptedPromptService(prompt_replies=list(prompt_replies)))
    kernel.add_plugin(ClassifyIntentTool(logger))
    return ScriptedPurchaseOrderAgent(
        kernel, state_store, logger, dummy_llm_config(), max_tool_rounds=rounds, replies=replies
    )


def test_turn_runs_tools_and_records_telemetry(state_store, logger):
    agent = build_agent(
        [tool_call(CLASSIFY, '{"user_prompt_input": "need a laptop"}', call_id="c1", content="Classifying first."), final(FINAL)],
        state_store,
        logger,
        prompt_replies=['{"intent": "RequestPurchase", "confidence": 0.95}'],
    )
    collector = TelemetryCollector()

    completion, history = agent.process_user_request("need a laptop", "s1", collector)

    assert completion == FINAL
    assert [m["role"] for m in history] == ["user", "assistant", "tool", "assistant"]
    assert "need a laptop" in history[0]["content"]
    response = history[2]["tool_responses"][0]
    assert response["tool_call_id"] == "c1"
    assert json.loads(response["content"])["intent"] == "RequestPurchase"
    assert CLASSIFY in agent.tools_offered

    narratives = [e.text for e in collector.get_all() if isinstance(e, AgentNarrative)]
    assert narratives == ["Classifying first.", FINAL]

    steps = reduce_steps(collector.get_all())
    assert [s.tool_name for s in steps] == ["determine_intent"]
    assert steps[0].agent_response == FINAL

    assert state_store.get_memory("s1")["intent"]["confidence"] == 0.95
    assert len(state_store.get_chat_history("s1")) == 4


def test_second_turn_reuses_history(state_store, logger):
    agent = build_agent([final(FINAL), final(FINAL)], state_store, logger)
    agent.process_user_request("first", "s1", TelemetryCollector())
    _, history = agent.process_user_request("second", "s1", TelemetryCollector())

    assert [m["role"] for m in history] == ["user", "assistant", "user", "assistant"]
    # The second model call saw the first turn.
    assert "first" in agent.seen[1][0]["content"]


def test_history_dto_leads_with_system_prompt():
    dto = history_dto([{"role": "user", "content": "hi"}, {"role": "assistant", "content": None, "tool_calls": []}])
    assert dto[0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert dto[1:] == [{"role": "user", "content": "hi"}, {"role": "assistant", "content": ""}]


def test_narratives_are_recorded_only_when_content_present(state_store, logger):
    agent = build_agent(
        [tool_call(CLASSIFY, '{"user_prompt_input": "x"}'), final("")],
        state_store,
        logger,
        prompt_replies=['{"intent": "Other", "confidence": 0.5}'],
    )
    collector = TelemetryCollector()
    agent.process_user_request("x", "s1", collector)
    assert not any(isinstance(e, AgentNarrative) for e in collector.get_all())


def test_tool_errors_go_back_to_the_model(state_store, logger):
    agent = build_agent(
        [tool_call(CLASSIFY, '{"user_prompt_input": "x"}'), final(FINAL)],
        state_store,
        logger,
        prompt_replies=[RuntimeError("prompt service down")],
    )
    completion, history = agent.process_user_request("x", "s1", TelemetryCollector())

    assert completion == FINAL
    assert "prompt service down" in history[2]["content"]


def test_unknown_tool_is_reported_to_the_model(state_store, logger):
    agent = build_agent([tool_call("Missing-tool"), final(FINAL)], state_store, logger)
    _, history = agent.process_user_request("x", "s1", TelemetryCollector())
    assert "Missing-tool" in history[2]["content"]


def test_round_limit_drops_unanswered_tool_calls(state_store, logger):
    agent = build_agent(
        [
            tool_call(CLASSIFY, '{"user_prompt_input": "x"}', call_id="c1"),
            tool_call(CLASSIFY, '{"user_prompt_input": "x"}', call_id="c2", content="Still working."),
        ],
        state_store,
        logger,
        prompt_replies=['{"intent": "Other", "confidence": 0.5}'],
        rounds=1,
    )
    completion, history = agent.process_user_request("x", "s1", TelemetryCollector())

    assert completion == "Still working."
    assert [m["role"] for m in history] == ["user", "assistant", "tool"]
    assert len(state_store.get_chat_history("s1")) == 3


def test_unexpected_error_returns_message_and_empty_history(state_store, logger):
    agent = build_agent([RuntimeError("model offline")], state_store, logger)
    completion, history = agent.process_user_request("x", "s1", TelemetryCollector())
    assert completion == UNEXPECTED_ERROR_PREFIX + "model offline"
    assert history == []
    assert state_store.get_chat_history("s1") is None


def test_parse_agent_reply():
    reply = parse_agent_reply('```json\n{"reflection": "r", "nextStep": "n", "userPrompt": "u", "products": [{"sku": "A"}]}\n```')
    assert (reply.reflection, reply.next_step, reply.user_prompt) == ("r", "n", "u")
    assert reply.products == [{"sku": "A"}]

    plain = parse_agent_reply("just text")
    assert plain.reflection == "just text"
    assert plain.user_prompt is None
