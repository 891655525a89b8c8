"""po_agent.tools.extract_details

Extracts order details (SKUs, quantity, department) from a validated purchase
request and attaches the matching catalog entries.
"""

from __future__ import annotations

from po_agent.contracts.tool_base import ProductRepository
from po_agent.json_utils import dumps, extract_float, extract_int, extract_json
from po_agent.kernel import Kernel, kernel_function
from po_agent.tools.validate_product import wrong_tool_response

EXTRACT_DETAILS_PROMPT = """Extract order details from the user's purchase request.

Supported products (sku: name):
{{catalog}}

User request: {{userRequest}}

Identify the requested product(s) AND extract order details.

Return STRICTLY valid JSON with these fields:
{
  "status": "matched" | "ambiguous" | "not_found",
  "sku": ["array of matching SKUs only"],
  "department": "extracted department name or null",
  "quantity": number (default 1),
  "confidence": float between 0 and 1
}

Decision rules:
- If the request matches exactly one product: status = "matched"
- If the request could refer to more than one product: status = "ambiguous"
- If no product is found: status = "not_found"
- Always return sku as an array, even for single matches

Extraction rules:
- Extract department ONLY if explicitly mentioned (e.g., "for IT department", "engineering team needs")
- Extract quantity ONLY if explicitly mentioned (e.g., "2 laptops", "three computers")
- If department is not mentioned: department = null
- If quantity is not mentioned: quantity = 1

Examples:
Request: "I need 2 MacBook Pros for the IT department"
{"status":"ambiguous","sku":["MBP-16-M3","MBP-14-M3"],"department":"IT","quantity":2,"confidence":0.85}

Request: "Order a Dell XPS 13"
{"status":"matched","sku":["DELL-XPS13"],"department":null,"quantity":1,"confidence":0.95}

Request: "I need a gaming laptop"
{"status":"not_found","sku":[],"department":null,"quantity":1,"confidence":0.90}

Do NOT include any explanations, markdown, or extra text. Return ONLY the JSON object.
"""


class ExtractDetailsTool:
    name = "ExtractOrderDetailsTool"

    def __init__(self, product_repository: ProductRepository, logger):
        self.products = product_repository
        self.logger = logger

    def _catalog_lines(self) -> str:
        return "\n".join(f"- {p.sku}: {p.name}" for p in self.products.get_summary_view())

    @kernel_function(
        "Extracts structured order details (model, quantity, department, confidence, status) from a user's "
        "purchase request and returns the matching catalog products.",
        user_request="Natural language text describing what the user wants to purchase.",
        intent="The user intent. This tool should only be used for 'RequestPurchase' intents.",
    )
    def extract_details(self, kernel: Kernel, user_request: str, intent: str) -> str:
        self.logger.info("Processing user request in %s: %s", self.name, user_request)
        if intent != "RequestPurchase":
            self.logger.warning("%s called with non-purchase intent: %s", self.name, intent)
            return wrong_tool_response(
                "extracts order details",
                intent,
                "Use a tool appropriate for the current intent.",
            )
        try:
            prompt = (
                EXTRACT_DETAILS_PROMPT
                .replace("{{catalog}}", self._catalog_lines())
                .replace("{{userRequest}}", user_request)
            )
            raw = kernel.invoke_prompt(prompt, {"userRequest": user_request})
            self.logger.info("Output from %s: %s", self.name, raw)
            obj = extract_json(raw)

            status = obj.get("status")
            skus = [str(s) for s in (obj.get("sku") or []) if s]
            if skus:
                products = self.products.get_by_skus(skus)
            elif status == "not_found":
                products = self.products.get_summary_view()
            else:
                products = []

            return dumps({
                "status": status,
                "quantity": extract_int(obj, "quantity", 1),
                "department": obj.get("department"),
                "confidence": extract_float(obj, "confidence", 0.0),
                "sku": skus,
                "products": [p.to_dict() for p in products],
            })
        except Exception as e:
            self.logger.exception("Error in %s", self.name)
            return dumps({"error": f"Failed to process request: {e}"})
