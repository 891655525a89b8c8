"""po_agent.tools.check_compliance

Checks a purchase request against the procurement policy.

The policy list lives in the prompt; the tool validates the model's answer shape
and falls back to a non-compliant result when the answer cannot be used.
"""

from __future__ import annotations

import json

from po_agent.json_utils import dumps, extract_float, extract_int, extract_json, extract_str
from po_agent.kernel import Kernel, kernel_function

COST_LIMIT_MESSAGE = "This item exceeds the $1000 limit. Please provide justification for more powerful hardware."

CHECK_COMPLIANCE_PROMPT = """You are a compliance reasoning agent responsible for determining whether a purchase request follows company procurement policies.

### Procurement Policy:
1. Hardware purchases must not exceed $1000 per unit.
2. Hardware requests over 10 units require department head approval.
3. Laptop requests are limited to one per employee every 3 years.
4. Desktop computers are not allowed for employees.
5. Hardware upgrades must be justified by age (minimum 36-month lifecycle).
6. Only pre-approved vendors may be used for laptops, desktops, and servers.
7. Any single requisition exceeding $50,000 must be routed to Finance VP for approval.
8. Bulk orders over 25 units must include supplier discount verification.
9. Any purchase tagged as "urgent" will trigger post-purchase audit.

---REQUEST---
Category: {{Category}}
Sku: {{Sku}}
Quantity: {{Quantity}}
UnitCost: {{UnitCost}}
Department: {{Department}}
---

Instructions:
- For each policy listed above, check if the purchase request violates the rule.
- If a violation is found, add a brief string description to the "violations" array. Use one string per violated policy; be concise.
- Special case: If the violation is for exceeding cost limits (Policy #1), use this exact message: "{{CostLimitMessage}}"
- If no policies are violated, leave the "violations" array empty.
- Set "compliant" to true if there are no violations; otherwise, set it to false.
- Return ONLY a valid JSON object using this exact structure:
{
  "compliant": <true|false>,
  "violations": ["<short description of policy violation, if any>"]
}
Do NOT include any additional text, explanations, or commentary. Return ONLY the JSON object.
"""


def _money(value: float) -> str:
    return f"${value:,.2f}"


class CheckComplianceTool:
    name = "CheckPolicyCompliance"

    def __init__(self, logger):
        self.logger = logger

    @kernel_function(
        "Checks if a purchase request complies with company procurement policies.",
        category="Category of the purchase request (e.g., Hardware, Software, Office Supplies)",
        sku="Specific item being requested",
        quantity="Number of items being requested",
        unit_cost="Cost per unit of the item",
        department="Department making the request (can be 'unknown' if not provided)",
    )
    def check_compliance(
        self, kernel: Kernel, category: str, sku: str, quantity: int, unit_cost: float, department: str = "unknown"
    ) -> str:
        try:
            prompt = (
                CHECK_COMPLIANCE_PROMPT
                .replace("{{Category}}", category)
                .replace("{{Sku}}", sku)
                .replace("{{Quantity}}", str(quantity))
                .replace("{{UnitCost}}", _money(unit_cost))
                .replace("{{Department}}", department)
                .replace("{{CostLimitMessage}}", COST_LIMIT_MESSAGE)
            )
            raw = kernel.invoke_prompt(prompt, {
                "Category": category,
                "Sku": sku,
                "Quantity": str(quantity),
                "UnitCost": _money(unit_cost),
                "Department": department,
            })
            self.logger.info("Output from %s: %s", self.name, raw)
            try:
                obj = json.loads(raw)
                if not isinstance(obj, dict) or "compliant" not in obj or "violations" not in obj:
                    raise ValueError("Response missing required 'compliant' or 'violations' properties")
            except ValueError:
                self.logger.warning("%s could not use the model output", self.name)
                return dumps({
                    "compliant": False,
                    "violations": ["Unable to parse policy compliance response from LLM"],
                    "error": "json_parse_error",
                })
            return raw
        except Exception as e:
            self.logger.exception("Error in %s", self.name)
            return dumps({
                "compliant": False,
                "violations": [f"Policy compliance check failed: {e}"],
                "error": "compliance_check_error",
            })

    @kernel_function(
        "Checks if a purchase request complies with company procurement policies using a JSON input.",
        json_input="JSON string containing purchase request details (category, sku, quantity, department, unitCost)",
    )
    def check_compliance_from_json(self, kernel: Kernel, json_input: str) -> str:
        try:
            obj = extract_json(json_input)
        except Exception as e:
            return dumps({
                "compliant": False,
                "violations": [f"Invalid JSON format: {e}"],
                "error": "json_parse_error",
            })
        return self.check_compliance(
            kernel,
            category=extract_str(obj, "category", "Other"),
            sku=extract_str(obj, "sku", "Unknown sku"),
            quantity=extract_int(obj, "quantity", 1),
            unit_cost=extract_float(obj, "unitCost", 0.0),
            department=extract_str(obj, "department", "General"),
        )
