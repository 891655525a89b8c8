"""po_agent.tools.justify_approval

Evaluates the user's justification for hardware above the $1000 per-unit limit.

The result always uses `justification_approved` so workflow memory sees one shape
whether the model approved, denied, or answered with something unusable.
"""

from __future__ import annotations

import json

from po_agent.json_utils import dumps
from po_agent.kernel import Kernel, kernel_function

DENIED_SUGGESTIONS = [
    "Provide specific technical requirements that require premium hardware",
    "Explain current performance bottlenecks affecting your productivity",
    "Detail how this hardware directly impacts business outcomes",
    "Quantify time savings or efficiency gains from the upgrade",
    "Specify software requirements that demand premium specifications",
]

UNPARSEABLE_SUGGESTIONS = [
    "Explain specific tasks that require premium hardware performance",
    "Detail current limitations affecting your work productivity",
    "Specify software or tools that demand premium specifications",
    "Quantify time or efficiency benefits from the hardware upgrade",
    "Provide concrete examples of how this hardware enables business value",
]

JUSTIFICATION_PROMPT = """You are an intelligent procurement approval agent responsible for evaluating justifications for hardware purchases that exceed the standard $1000 limit.

### Request Details:
Item: {{item}}
Cost: {{cost}}
User Justification: {{justification}}

### Evaluation Criteria:
APPROVE if the justification demonstrates:
- Specific technical requirements (development, design, video editing, data analysis)
- Performance needs that require premium hardware
- Business-critical use cases
- Clear productivity or efficiency benefits

DENY if the justification:
- Is vague or generic ("I need it for work")
- Doesn't justify the premium cost
- Could be satisfied with standard hardware
- Appears to be personal preference

### Instructions:
- Analyze the justification carefully
- Consider if the premium cost is warranted for the stated use case
- If DENYING, provide 5 specific suggestions that could help the user get approved
- Suggestions should be tailored to the user's apparent intent and the specific item requested

### Response Format:
If APPROVED, return:
{"approved": true, "reason": "<brief explanation>", "message": "<user-friendly approval message>"}

If DENIED, return:
{"approved": false, "reason": "<brief explanation>", "message": "<user-friendly denial message>",
 "suggestions": ["<suggestion 1>", "<suggestion 2>", "<suggestion 3>", "<suggestion 4>", "<suggestion 5>"]}

Return ONLY a valid JSON object. No additional text, explanations, or commentary.
"""


class JustifyApprovalTool:
    name = "ApprovalJustificationTool"

    def __init__(self, logger):
        self.logger = logger

    @kernel_function(
        "Evaluates justification for hardware purchases that exceed the $1000 cost limit",
        justification="The justification provided by the user for exceeding the cost limit",
        item="The requested hardware item that exceeds the limit",
        cost="The cost that exceeds the $1000 limit",
    )
    def evaluate_justification(self, kernel: Kernel, justification: str, item: str, cost: float) -> str:
        try:
            shown_cost = f"${cost:,.2f}"
            prompt = (
                JUSTIFICATION_PROMPT
                .replace("{{justification}}", justification)
                .replace("{{item}}", item)
                .replace("{{cost}}", shown_cost)
            )
            raw = kernel.invoke_prompt(prompt, {"justification": justification, "item": item, "cost": shown_cost})
            self.logger.info("Output from %s: %s", self.name, raw)
            try:
                obj = json.loads(raw)
                if not isinstance(obj, dict) or "approved" not in obj or "reason" not in obj:
                    raise ValueError("Response missing required 'approved' or 'reason' properties")
            except ValueError:
                return dumps({
                    "justification_approved": False,
                    "reason": "Unable to process justification properly",
                    "message": "Please provide a clearer justification for this hardware purchase.",
                    "suggestions": UNPARSEABLE_SUGGESTIONS,
                    "error": "json_parse_error",
                })

            approved = bool(obj.get("approved"))
            suggestions = obj.get("suggestions")
            if not approved and not suggestions:
                return dumps({
                    "justification_approved": False,
                    "reason": obj.get("reason"),
                    "message": "Your justification needs more specific details to warrant the premium cost.",
                    "suggestions": DENIED_SUGGESTIONS,
                })
            return dumps({
                "justification_approved": approved,
                "reason": obj.get("reason"),
                "message": obj.get("message"),
                "suggestions": [str(s) for s in suggestions] if suggestions else None,
            })
        except Exception as e:
            self.logger.exception("Error in %s", self.name)
            return dumps({
                "justification_approved": False,
                "reason": f"Justification evaluation failed: {e}",
                "error": "evaluation_error",
            })
