import json

from po_agent.step_reducer import UNRESOLVED_TOOL, reduce_steps, short_label, tool_label
from po_agent.telemetry import AgentNarrative, ToolCallStarted, ToolJsonResult


def call(name):
    return ToolCallStarted(full_tool_name=name)


def payload_call(full_name):
    return ToolCallStarted(full_tool_name=full_name, payload=json.dumps({"Type": "ToolCall", "ToolName": full_name}))


def test_foo_bar_scenario():
    steps = reduce_steps([call("Foo.Bar"), ToolJsonResult.parse('Foo.Bar: {"a":1}'), AgentNarrative("done")])
    assert [s.to_dict() for s in steps] == [{"toolName": "Bar", "jsonResult": '{"a":1}', "agentResponse": "done"}]


def test_nested_anonymous_call_collapses_into_parent():
    steps = reduce_steps([
        call("RealTool"),
        call("InvokePromptAsync_abc123"),
        ToolJsonResult("InvokePromptAsync_abc123", '{"x": 2}'),
        AgentNarrative("looked fine"),
    ])
    assert len(steps) == 1
    assert steps[0].tool_name == "RealTool"
    assert steps[0].json_result == '{"x": 2}'
    assert steps[0].agent_response == "looked fine"


def test_anonymous_call_with_plugin_prefix_collapses():
    steps = reduce_steps([
        payload_call("ClassifyIntentTool.determine_intent"),
        payload_call(".InvokePromptAsync_0f0f"),
        ToolJsonResult("InvokePromptAsync_0f0f", '{"intent": "Other"}'),
        ToolJsonResult("determine_intent", '{"intent": "Other", "confidence": 0.9}'),
        AgentNarrative("ok"),
    ])
    assert [s.tool_name for s in steps] == ["determine_intent"]
    assert steps[0].json_result == '{"intent": "Other", "confidence": 0.9}'


def test_orphan_result_is_ignored():
    assert reduce_steps([ToolJsonResult("X", "{}")]) == []
    assert reduce_steps([AgentNarrative("hello")]) == []


def test_unterminated_step_is_flushed():
    steps = reduce_steps([call("X")])
    assert [s.to_dict() for s in steps] == [{"toolName": "X", "jsonResult": "", "agentResponse": ""}]


def test_malformed_payload_is_dropped():
    bad = ToolCallStarted(full_tool_name="A.B", payload="{not json")
    assert tool_label(bad) == UNRESOLVED_TOOL
    assert reduce_steps([bad, ToolJsonResult("B", "{}"), AgentNarrative("n")]) == []


def test_non_object_payload_is_unresolved():
    assert tool_label(ToolCallStarted(payload="[1, 2]")) == UNRESOLVED_TOOL


def test_payload_without_tool_name_yields_empty_label_and_no_step():
    entry = ToolCallStarted(payload=json.dumps({"Type": "ToolCall"}))
    assert tool_label(entry) == ""
    assert reduce_steps([entry, AgentNarrative("n")]) == []


def test_parentless_anonymous_call_is_dropped():
    steps = reduce_steps([call("InvokePromptAsync_1"), ToolJsonResult("x", "{}"), AgentNarrative("n"), call("Real")])
    assert [s.tool_name for s in steps] == ["Real"]


def test_anonymous_call_after_narrative_does_not_touch_closed_step():
    steps = reduce_steps([call("A"), AgentNarrative("first"), call("InvokePromptAsync_9"), ToolJsonResult("y", "{}")])
    assert [s.to_dict() for s in steps] == [{"toolName": "A", "jsonResult": "", "agentResponse": "first"}]


def test_last_json_result_wins():
    steps = reduce_steps([call("A"), ToolJsonResult("A", "1"), ToolJsonResult("A", "2")])
    assert steps[0].json_result == "2"


def test_consecutive_calls_without_narrative_each_produce_a_step():
    steps = reduce_steps([call("A"), call("B"), ToolJsonResult("B", "{}"), AgentNarrative("n"), call("C")])
    assert [s.tool_name for s in steps] == ["A", "B", "C"]
    assert steps[0].json_result == ""
    assert steps[1].agent_response == "n"


def test_step_count_order_and_idempotence():
    entries = [
        call("P.one"), call("InvokePromptAsync_a"), ToolJsonResult("one", "{}"), AgentNarrative("1"),
        call("Q.two"), AgentNarrative("2"),
        ToolCallStarted(payload="oops"),
        call("R.three"), call(".InvokePromptAsync_b"),
    ]
    first = reduce_steps(entries)
    assert [s.tool_name for s in first] == ["one", "two", "three"]
    assert reduce_steps(entries) == first


def test_short_label_splits_on_first_dot_only():
    assert short_label("Plugin.Func") == "Func"
    assert short_label("A.B.C") == "B.C"
    assert short_label("NoPlugin") == "NoPlugin"


def test_deeply_nested_payload_is_dropped_not_raised():
    entries = [
        ToolCallStarted("Real"),
        ToolCallStarted(full_tool_name="A.B", payload="[" * 200000),
        AgentNarrative("n"),
    ]
    steps = reduce_steps(entries)
    assert [s.tool_name for s in steps] == ["Real"]
    assert tool_label(entries[1]) == UNRESOLVED_TOOL
