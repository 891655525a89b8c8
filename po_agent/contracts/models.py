"""po_agent.contracts.models

Shared models for the API, agent, tools and storage.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Literal, Optional

Intent = Literal["RequestPurchase", "ShowSupportedProducts", "ShowSpecs", "ShowComplianceRules", "Other"]


@dataclass
class ToolStep:
    """One real tool call collapsed with its JSON result and the narrative that followed it."""
    tool_name: str = ""
    json_result: str = ""
    agent_response: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "toolName": self.tool_name,
            "jsonResult": self.json_result,
            "agentResponse": self.agent_response,
        }


@dataclass
class AgentReply:
    """Fields the agent is instructed to return as its final JSON object."""
    reflection: Optional[str] = None
    next_step: Optional[str] = None
    user_prompt: Optional[str] = None
    products: Any = None


@dataclass
class DebugInfo:
    session_id: str
    history: list[dict[str, Any]]
    telemetry: list[str]
    tool_steps: list[ToolStep]
    memory: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "history": self.history,
            "telemetry": self.telemetry,
            "toolSteps": [s.to_dict() for s in self.tool_steps],
            "memory": self.memory,
        }


@dataclass
class AgentResponse:
    """Response body returned by the purchase request endpoint."""
    reflection: Optional[str]
    user_prompt: Optional[str]
    products: Any = None
    next_step: Optional[str] = None
    debug_info: Optional[DebugInfo] = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "reflection": self.reflection,
            "userPrompt": self.user_prompt,
            "products": self.products,
        }
        if self.debug_info is not None:
            body["nextStep"] = self.next_step
            body["debugInfo"] = self.debug_info.to_dict()
        return body


@dataclass
class UpgradeOption:
    type: str
    to: str
    cost_delta: float

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "to": self.to, "costDelta": self.cost_delta}


@dataclass
class BaseSpecs:
    ram: str
    storage: str
    cpu: str

    def to_dict(self) -> dict[str, Any]:
        return {"ram": self.ram, "storage": self.storage, "cpu": self.cpu}


@dataclass
class Product:
    """A catalog entry. Optional fields are omitted from summary views."""
    sku: str
    name: str
    description: str
    cost: float
    image_url: Optional[str] = None
    is_available: bool = True
    base_specs: Optional[BaseSpecs] = None
    upgrade_options: list[UpgradeOption] = field(default_factory=list)

    def summary(self) -> "Product":
        return Product(sku=self.sku, name=self.name, description=self.description, cost=self.cost)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "sku": self.sku,
            "name": self.name,
            "description": self.description,
            "cost": self.cost,
        }
        if self.image_url:
            out["imageUrl"] = self.image_url
        if self.base_specs is not None:
            out["isAvailable"] = self.is_available
            out["baseSpecs"] = self.base_specs.to_dict()
        if self.upgrade_options:
            out["upgradeOptions"] = [u.to_dict() for u in self.upgrade_options]
        return out
