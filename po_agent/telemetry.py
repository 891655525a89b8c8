"""po_agent.telemetry

Per-turn telemetry for the purchase order agent.

The invocation filter and the agent loop append typed entries while a turn runs;
the API reduces them into tool steps (see po_agent.step_reducer) once the turn ends.
One collector exists per HTTP request and is dropped after the response is sent.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Union


@dataclass(frozen=True)
class ToolCallStarted:
    """A kernel function was about to run.

    `payload` is the JSON document written by the invocation filter; when it is set
    the tool name is recovered from its `ToolName` field.
    """
    full_tool_name: str = ""
    parameters: dict[str, str] = field(default_factory=dict)
    payload: Optional[str] = None


@dataclass(frozen=True)
class ToolJsonResult:
    """A kernel function returned a JSON document."""
    tool_label: str
    json: str

    @classmethod
    def parse(cls, text: str) -> "ToolJsonResult":
        """Build from the `"<label>: <json>"` form; the label ends at the first colon.

        Text that already starts as a JSON document carries no label.
        """
        if text.lstrip().startswith(("{", "[")):
            return cls(tool_label="", json=text.strip())
        label, sep, rest = text.partition(":")
        if not sep or not label.strip():
            return cls(tool_label="", json=text.strip())
        return cls(tool_label=label.strip(), json=rest.strip())


@dataclass(frozen=True)
class AgentNarrative:
    """Text produced by a model completion."""
    text: str


TelemetryEntry = Union[ToolCallStarted, ToolJsonResult, AgentNarrative]


def describe_entry(entry: TelemetryEntry) -> str:
    """One-line rendering used in the debug payload."""
    if isinstance(entry, ToolCallStarted):
        if entry.payload is not None:
            return f"[TOOL_CALL] {entry.payload}"
        params = ", ".join(f"{k}: {v}" for k, v in entry.parameters.items()) or "(No parameters)"
        return f"[TOOL_CALL] {entry.full_tool_name} | Params: {params}"
    if isinstance(entry, ToolJsonResult):
        return f"[TOOL_JSON_RESULT] {entry.tool_label}: {entry.json}"
    if isinstance(entry, AgentNarrative):
        return f"[AGENT_RESPONSE] {entry.text}"
    return repr(entry)


class TelemetryCollector:
    """Append-only, ordered log of telemetry entries for a single turn."""

    def __init__(self) -> None:
        self._entries: list[TelemetryEntry] = []

    def add(self, entry: TelemetryEntry) -> None:
        self._entries.append(entry)

    def get_all(self) -> tuple[TelemetryEntry, ...]:
        return tuple(self._entries)

    def describe(self) -> list[str]:
        return [describe_entry(e) for e in self._entries]

    def __len__(self) -> int:
        return len(self._entries)
