"""po_agent.memory

Typed per-session workflow memory.

Each field holds the last structured result of one workflow stage. The agent
fills it from the turn's tool steps after every request, so the next turn (and
the debug view) can see where the purchase request stands without re-reading
the transcript.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Optional

from po_agent.contracts.models import ToolStep
from po_agent.json_utils import safe_parse_json


class MemoryField(str, Enum):
    INTENT = "intent"
    PRODUCT_VALIDATION = "productValidation"
    ORDER_DETAILS = "orderDetails"
    COMPLIANCE = "compliance"
    JUSTIFICATION = "justification"


# Kernel function name -> memory slot.
TOOL_FIELDS: dict[str, MemoryField] = {
    "determine_intent": MemoryField.INTENT,
    "validate_item": MemoryField.PRODUCT_VALIDATION,
    "extract_details": MemoryField.ORDER_DETAILS,
    "check_compliance": MemoryField.COMPLIANCE,
    "check_compliance_from_json": MemoryField.COMPLIANCE,
    "evaluate_justification": MemoryField.JUSTIFICATION,
}


class WorkflowMemory:
    def __init__(self, values: Optional[dict[MemoryField, Any]] = None):
        self._values: dict[MemoryField, Any] = dict(values or {})

    def update(self, field: MemoryField, value: Any) -> None:
        if not isinstance(field, MemoryField):
            raise ValueError(f"Unsupported memory field: {field!r}")
        self._values[field] = value

    def apply_steps(self, steps: Iterable[ToolStep]) -> int:
        """Store the parsed JSON result of each recognised step. Returns how many were applied."""
        applied = 0
        for step in steps:
            field = TOOL_FIELDS.get(step.tool_name)
            if field is None:
                continue
            value = safe_parse_json(step.json_result)
            if value is None:
                continue
            self.update(field, value)
            applied += 1
        return applied

    def to_dict(self) -> dict[str, Any]:
        return {f.value: self._values[f] for f in MemoryField if f in self._values}

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "WorkflowMemory":
        values: dict[MemoryField, Any] = {}
        for key, value in (data or {}).items():
            try:
                values[MemoryField(key)] = value
            except ValueError:
                continue
        return cls(values)

    def __bool__(self) -> bool:
        return bool(self._values)
