"""po_agent.telemetry_filter

Invocation filter that records every kernel function call of a turn.

For each invocation it appends:
- a ToolCallStarted entry whose payload is a JSON document (ToolName, Parameters, StartTime)
- a ToolJsonResult entry when the function returned a JSON string
and writes human-readable start/end lines to the application log.
"""

from __future__ import annotations

import json
import time
from datetime import datetime, timezone
from typing import Any, Callable

from po_agent.json_utils import looks_like_json
from po_agent.kernel import FunctionInvocationContext
from po_agent.telemetry import TelemetryCollector, ToolCallStarted, ToolJsonResult


def _truncate(value: str, max_len: int) -> str:
    if not value:
        return ""
    return value if len(value) <= max_len else f"{value[:max_len]}..."


def _format_params(arguments: dict[str, Any]) -> str:
    if not arguments:
        return "(No parameters)"
    parts = []
    for k, v in arguments.items():
        if v is None:
            shown = "null"
        elif isinstance(v, str):
            shown = f'"{_truncate(v, 50)}"'
        else:
            shown = str(v)
        parts.append(f"{k}: {shown}")
    return ", ".join(parts)


def _clock() -> str:
    return datetime.now(timezone.utc).strftime("%H:%M:%S.%f")[:-3]


class TelemetryFilter:
    """Request-scoped: one instance per turn, bound to that turn's collector."""

    def __init__(self, collector: TelemetryCollector, logger):
        self.collector = collector
        self.logger = logger

    def on_function_invocation(
        self, context: FunctionInvocationContext, next_: Callable[[FunctionInvocationContext], None]
    ) -> None:
        fn = context.function
        params = {k: "" if v is None else str(v) for k, v in context.arguments.items()}
        payload = json.dumps(
            {
                "Type": "ToolCall",
                "ToolName": fn.full_name,
                "Description": fn.description,
                "Parameters": params,
                "StartTime": _clock(),
            },
            indent=2,
            ensure_ascii=False,
        )
        self.collector.add(ToolCallStarted(full_tool_name=fn.full_name, parameters=params, payload=payload))
        self.logger.info(
            "Telemetry added: [FUNCTION START] %s | Desc: %s | Params: %s",
            fn.full_name, fn.description, _format_params(context.arguments),
        )

        start = time.perf_counter()
        succeeded = False
        error = ""
        try:
            next_(context)
            succeeded = True
        except Exception as e:
            error = str(e)
            self.logger.error("Function execution failed: %s", fn.name, exc_info=True)
            raise
        finally:
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            line = (
                f"[FUNCTION END] {fn.full_name} | Status: {'SUCCESS' if succeeded else 'FAILED'} | "
                f"Duration: {elapsed_ms}ms | EndTime: {_clock()}"
            )
            result = context.result
            if succeeded and result:
                if looks_like_json(result):
                    try:
                        formatted = json.dumps(json.loads(result), indent=2, ensure_ascii=False)
                        self.collector.add(ToolJsonResult(tool_label=fn.name, json=formatted))
                        line += " | Result: [JSON data captured separately]"
                    except ValueError:
                        line += f" | Result: {_truncate(result, 100)}"
                        self.logger.warning("Tool %s returned malformed JSON", fn.name)
                else:
                    line += f" | Result: {_truncate(result, 100)}"
            elif not succeeded:
                line += f" | Error: {error}"
            self.logger.info("Telemetry added: %s", line)
