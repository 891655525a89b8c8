"""po_agent.tools.classify_intent

Classifies the user's primary goal into one known intent.

Only the intent and a confidence are produced here; entities (SKUs, quantity,
department) are extracted later by ExtractDetailsTool.
"""

from __future__ import annotations

from po_agent.json_utils import dumps, extract_float, extract_json
from po_agent.kernel import Kernel, kernel_function

INTENT_ROUTER_PROMPT = """You are a highly specialized AI assistant for a corporate purchasing system.
Your only task is to analyze the user's input and classify their primary intent.

User input: {{userPromptInput}}

### Intents
- **RequestPurchase**: The user wants to buy or order a new item.
- **ShowSupportedProducts**: The user is asking for a list of available products.
- **ShowSpecs**: The user is asking for the technical specifications of a specific product.
- **ShowComplianceRules**: The user is asking about the company's purchasing policy.
- **Other**: Something that is not relevant for this AI application. Set Confidence to 0.0.
- confidence: A float value between 0.0 and 1.0 indicating how confident the model is in its classification.

### JSON Output
Return STRICTLY valid JSON with the following structure:
{
  "intent": "One of the intents listed above",
  "confidence": 0.0
}

### Examples
**User Input**: "I need to order a new laptop for a new hire"
{"intent": "RequestPurchase", "confidence": 0.98}
---
**User Input**: "What are the specs for the MBP-16-M3?"
{"intent": "ShowSpecs", "confidence": 0.99}
---
**User Input**: "Show me the products that are available"
{"intent": "ShowSupportedProducts", "confidence": 0.95}
"""


class ClassifyIntentTool:
    name = "ClassifyIntentTool"

    def __init__(self, logger):
        self.logger = logger

    @kernel_function(
        "Determines the primary intent and a confidence score for any user request made to the purchasing system.",
        user_prompt_input="The initial, unprocessed text query from the user that needs to be classified.",
    )
    def determine_intent(self, kernel: Kernel, user_prompt_input: str) -> str:
        self.logger.info("Processing user request in %s: %s", self.name, user_prompt_input)
        try:
            prompt = INTENT_ROUTER_PROMPT.replace("{{userPromptInput}}", user_prompt_input)
            raw = kernel.invoke_prompt(prompt, {"userPrompt": user_prompt_input})
            self.logger.info("Output from %s: %s", self.name, raw)
            obj = extract_json(raw)
            return dumps({"intent": obj.get("intent"), "confidence": extract_float(obj, "confidence", 0.0)})
        except Exception as e:
            self.logger.exception("Error in %s", self.name)
            return dumps({"error": f"Failed to parse model response: {e}"})
