from po_agent.telemetry import AgentNarrative, TelemetryCollector, ToolCallStarted, ToolJsonResult, describe_entry


def test_collector_preserves_order():
    c = TelemetryCollector()
    entries = [ToolCallStarted(full_tool_name="A.b"), ToolJsonResult("b", "{}"), AgentNarrative("done")]
    for e in entries:
        c.add(e)
    assert c.get_all() == tuple(entries)
    assert len(c) == 3


def test_get_all_is_a_snapshot():
    c = TelemetryCollector()
    snapshot = c.get_all()
    c.add(AgentNarrative("later"))
    assert snapshot == ()


def test_json_result_parse_splits_on_first_colon():
    r = ToolJsonResult.parse('Foo.Bar: {"url": "http://x"}')
    assert r.tool_label == "Foo.Bar"
    assert r.json == '{"url": "http://x"}'


def test_json_result_parse_without_label():
    r = ToolJsonResult.parse('{"a": 1}')
    assert r.tool_label == ""
    assert r.json == '{"a": 1}'
    assert ToolJsonResult.parse("  [1, 2]\n").json == "[1, 2]"
    assert ToolJsonResult.parse("[]").tool_label == ""


def test_describe_entries():
    assert describe_entry(AgentNarrative("hi")) == "[AGENT_RESPONSE] hi"
    assert describe_entry(ToolJsonResult("b", "{}")) == "[TOOL_JSON_RESULT] b: {}"
    assert describe_entry(ToolCallStarted(full_tool_name="A.b", parameters={"x": "1"})) == "[TOOL_CALL] A.b | Params: x: 1"
    assert describe_entry(ToolCallStarted(payload='{"ToolName": "A.b"}')) == '[TOOL_CALL] {"ToolName": "A.b"}'
