"""po_agent.json_utils

JSON helpers shared by tools and the agent.

- `extract_json` recovers the first JSON object from model output.
- The `extract_*` readers pull fields out of loosely-typed tool input with defaults
  instead of raising, so a sloppy argument from the model degrades gracefully.
"""

from __future__ import annotations
import json
import re
from typing import Any, Optional

from po_agent.errors import LLMOutputError


def extract_json(text: str) -> dict[str, Any]:
    """Extract the first JSON object from model output."""
    if not text or not text.strip():
        raise LLMOutputError("Empty model output")

    m = re.search(r"```json\s*(\{.*?\})\s*```", text, flags=re.DOTALL)
    candidate = m.group(1) if m else None
    if candidate is None:
        m2 = re.search(r"(\{.*\})", text, flags=re.DOTALL)
        if not m2:
            raise LLMOutputError("No JSON object found in model output")
        candidate = m2.group(1)

    try:
        obj = json.loads(candidate)
    except ValueError as e:
        raise LLMOutputError(f"Model output is not valid JSON: {e}") from e
    if not isinstance(obj, dict):
        raise LLMOutputError("Model output JSON is not an object")
    return obj


def safe_parse_json(text: Optional[str]) -> Any:
    """Parse JSON text, returning None on failure."""
    if text is None:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def looks_like_json(value: str) -> bool:
    if not value or not value.strip():
        return False
    v = value.strip()
    return (v.startswith("{") and v.endswith("}")) or (v.startswith("[") and v.endswith("]"))


def extract_str(obj: dict[str, Any], name: str, default: str = "") -> str:
    v = obj.get(name)
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, str):
        return v
    if isinstance(v, (int, float)):
        return str(v)
    return default


def extract_int(obj: dict[str, Any], name: str, default: int = 0) -> int:
    v = obj.get(name)
    if isinstance(v, bool):
        return default
    if isinstance(v, int):
        return v
    if isinstance(v, float) and v.is_integer():
        return int(v)
    if isinstance(v, str):
        try:
            return int(v.strip())
        except ValueError:
            return default
    return default


def extract_float(obj: dict[str, Any], name: str, default: float = 0.0) -> float:
    v = obj.get(name)
    if isinstance(v, bool):
        return default
    if isinstance(v, (int, float)):
        return float(v)
    if isinstance(v, str):
        try:
            return float(v.strip().lstrip("$").replace(",", ""))
        except ValueError:
            return default
    return default


def extract_bool(obj: dict[str, Any], name: str, default: bool = False) -> bool:
    v = obj.get(name)
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        s = v.strip().lower()
        if s == "true":
            return True
        if s == "false":
            return False
    return default


def dumps(obj: Any) -> str:
    """Compact JSON used for tool results."""
    return json.dumps(obj, ensure_ascii=False, default=str)
