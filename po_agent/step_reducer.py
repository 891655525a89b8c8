"""po_agent.step_reducer

Folds one turn's telemetry into the ordered list of tool steps shown to API clients.

Every real tool call shows up twice in the log: once under its own name and once
under the anonymous prompt execution it issues (`InvokePromptAsync_<hex>`). The
anonymous call belongs to the step opened by its parent, so the reducer keeps
the last real tool name around until a narrative closes the step.
"""

from __future__ import annotations

import json
import logging
from typing import Iterable, Optional

from po_agent.contracts.models import ToolStep
from po_agent.telemetry import AgentNarrative, TelemetryEntry, ToolCallStarted, ToolJsonResult

ANONYMOUS_PROMPT_PREFIX = "InvokePromptAsync_"
UNRESOLVED_TOOL = "Unknown Tool"

_log = logging.getLogger("po_agent")


def is_anonymous(label: str) -> bool:
    return label.startswith(ANONYMOUS_PROMPT_PREFIX)


def short_label(full_tool_name: str) -> str:
    """`Plugin.Function` -> `Function`; names without a plugin part are returned unchanged.

    Only the plugin prefix is dropped: `A.B.C` -> `B.C`. Kernel function names are Python
    identifiers, so a real tool name never has a second dot.
    """
    parts = full_tool_name.split(".", 1)
    return parts[1] if len(parts) > 1 else full_tool_name


def tool_label(entry: ToolCallStarted, logger: Optional[logging.Logger] = None) -> str:
    if entry.payload is None:
        return short_label(entry.full_tool_name)
    try:
        data = json.loads(entry.payload)
        if not isinstance(data, dict):
            raise ValueError("tool call payload is not a JSON object")
    except (TypeError, ValueError, RecursionError) as e:
        (logger or _log).warning("Failed to parse tool call JSON: %s", e)
        return UNRESOLVED_TOOL
    full_name = data.get("ToolName")
    return short_label(str(full_name)) if full_name is not None else ""


def _keep(step: ToolStep) -> bool:
    name = step.tool_name
    return bool(name) and not is_anonymous(name) and name != UNRESOLVED_TOOL


def reduce_steps(entries: Iterable[TelemetryEntry], logger: Optional[logging.Logger] = None) -> list[ToolStep]:
    """Reduce an ordered telemetry log into tool steps.

    Results and narratives attach to the most recently opened real step; orphans
    are ignored. A step still open when the log ends is kept as-is.
    """
    steps: list[ToolStep] = []
    current = ToolStep()
    has_active = False
    parent_tool_name = ""

    for entry in entries:
        if isinstance(entry, ToolCallStarted):
            label = tool_label(entry, logger)
            if is_anonymous(label):
                if has_active and parent_tool_name:
                    current.tool_name = parent_tool_name
                else:
                    if not has_active:
                        current = ToolStep()
                    current.tool_name = UNRESOLVED_TOOL
                    has_active = True
            else:
                if has_active:
                    steps.append(current)
                current = ToolStep(tool_name=label)
                parent_tool_name = label
                has_active = True

        elif isinstance(entry, ToolJsonResult):
            if has_active:
                current.json_result = entry.json

        elif isinstance(entry, AgentNarrative):
            if has_active:
                current.agent_response = entry.text
                steps.append(current)
                current = ToolStep()
                has_active = False
                parent_tool_name = ""

    if has_active:
        steps.append(current)

    return [s for s in steps if _keep(s)]
