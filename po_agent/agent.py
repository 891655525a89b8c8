"""po_agent.agent

Single procurement agent driving the tool-calling loop for one user turn.

Flow per request:
1) load the session transcript and seed a fresh AutoGen assistant with it
2) register the kernel's tools (assistant proposes, requester proxy executes)
3) the requester sends the wrapped user prompt; AutoGen runs tool rounds until the
   assistant answers without tool calls
4) persist transcript + workflow memory

Every assistant message with content is recorded as an AgentNarrative in the turn's
telemetry collector; tool invocations are recorded by the TelemetryFilter.
"""

from __future__ import annotations

from typing import Any, Callable

import autogen

from po_agent.contracts.models import AgentReply
from po_agent.contracts.tool_base import StateStore
from po_agent.errors import LLMOutputError
from po_agent.json_utils import extract_json
from po_agent.kernel import Kernel
from po_agent.memory import WorkflowMemory
from po_agent.step_reducer import reduce_steps
from po_agent.telemetry import AgentNarrative, TelemetryCollector
from po_agent.telemetry_filter import TelemetryFilter

UNEXPECTED_ERROR_PREFIX = "An unexpected error occurred while processing your request: "

SYSTEM_PROMPT = """You are a goal-driven, autonomous procurement agent.
Your primary purpose is to manage employee purchase order requests from start to finish by making intelligent, sequential use of the tools provided.

Tools

You may use the following tools:

  1. ClassifyIntentTool - Classifies an employee's request into a specific category: Request product, Show supported products, show product specs, show procurement policies.
  2. ValidateProductTool - Acts as a gatekeeper for the 'Request product' workflow to confirm the requested item is a workplace computer.
  3. ExtractDetailsTool - Extracts specific details like model, quantity, SKUs from a validated purchase request.
  4. CheckComplianceTool - Review the request against all applicable procurement policies.
  5. JustifyApprovalTool - Evaluates the justification for hardware purchases that violate compliance rules.
  6. ShowProductsTool - Lists every qualified product with its specs and upgrade options.

Core Principles:

  - Reflect and Plan: After each tool use, reflect on the result and adjust your plan to achieve the goal.
  - Reason Step-by-Step: Your internal monologue must show your reasoning for choosing each next action.
  - Do Not Guess: If information is missing or a step fails, use your tools to get the information or stop and ask for human approval.
  - Expect Structured JSON: All tools will return their results in a structured JSON format. Your next action
    must be based on the key-value data contained within this JSON output.

Workflow Rules:

  - Confidence Score Check: If the ClassifyIntentTool returns a confidence score below 0.8, you must stop all other actions. Immediately ask the user for clarification about their request.
  - Purchase Request Validation: If the ClassifyIntentTool identifies the intent as 'RequestPurchase', the ONLY AVAILABLE tool for your next step is ValidateProductTool. You are forbidden from using any other tool, including ExtractDetailsTool, until ValidateProductTool has been successfully executed.
  - Policy Tool Usage: The CheckComplianceTool can and should be used even if some request information is incomplete. It will determine which policies are applicable based on the available data.
"""

USER_PROMPT_TEMPLATE = """
A new purchase order request has been submitted.

Request Details:
{{userInputPrompt}}

Your task is to process this request using the available tools.
At each step, select and invoke the tool most appropriate for the current context, and reflect on the output before proceeding.
Continue until the purchase order is ready for submission, or stop if the request is invalid, non-compliant, or requires escalation.

At the end of each interaction, respond ONLY with a valid JSON object containing these fields:

{
  "reflection": "(Briefly explain your reasoning or the result for this step.)",
  "nextStep": "(What should the agent or user do next? E.g., ask for clarification, proceed to approval, etc.)",
  "userPrompt": "(The exact question or instruction for the user. No extra text.)",
  "products": (If the user must select from a list of products, or if showing available products is helpful, include a JSON array of product objects here. Otherwise, omit this property.)
}

Do NOT include any text outside the JSON object.
"""


def parse_agent_reply(completion: str) -> AgentReply:
    """Read the final JSON object; a non-JSON completion becomes the reflection."""
    try:
        obj = extract_json(completion)
    except LLMOutputError:
        return AgentReply(reflection=completion or None)
    return AgentReply(
        reflection=obj.get("reflection"),
        next_step=obj.get("nextStep"),
        user_prompt=obj.get("userPrompt"),
        products=obj.get("products"),
    )


def history_dto(history: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Transcript as shown in the debug payload, system prompt first."""
    out = [{"role": "system", "content": SYSTEM_PROMPT}]
    for m in history:
        content = m.get("content")
        out.append({"role": m.get("role", ""), "content": content if isinstance(content, str) else ""})
    return out


def _asks_for_tools(message: dict[str, Any]) -> bool:
    return bool(message.get("tool_calls"))


class PurchaseOrderAgent:
    def __init__(self, kernel: Kernel, state_store: StateStore, logger, llm_config: Any, max_tool_rounds: int = 8):
        self.kernel = kernel
        self.state_store = state_store
        self.logger = logger
        self.llm_config = llm_config
        self.max_tool_rounds = max(1, max_tool_rounds)

    def process_user_request(
        self, prompt: str, session_id: str, collector: TelemetryCollector
    ) -> tuple[str, list[dict[str, Any]]]:
        try:
            self.logger.info("Processing user request: %s", prompt)
            history = self.state_store.get_chat_history(session_id) or []

            turn_kernel = self.kernel.for_turn([TelemetryFilter(collector, self.logger)])
            assistant, requester = self._build_agents(turn_kernel, history, collector)
            requester.initiate_chat(
                assistant,
                message=USER_PROMPT_TEMPLATE.replace("{{userInputPrompt}}", prompt),
                clear_history=False,
                silent=True,
            )
            history = list(assistant.chat_messages[requester])
            completion = self._final_answer(history)

            memory = WorkflowMemory.from_dict(self.state_store.get_memory(session_id))
            memory.apply_steps(reduce_steps(collector.get_all(), self.logger))

            self.state_store.save_chat_history(session_id, history)
            self.state_store.save_memory(session_id, memory.to_dict())
            return completion, history
        except Exception as e:
            self.logger.exception("Error in %s: %s", type(self).__name__, e)
            return UNEXPECTED_ERROR_PREFIX + str(e), []

    def _build_agents(
        self, kernel: Kernel, history: list[dict[str, Any]], collector: TelemetryCollector
    ) -> tuple[autogen.ConversableAgent, autogen.UserProxyAgent]:
        requester = autogen.UserProxyAgent(
            name="requester",
            human_input_mode="NEVER",
            code_execution_config=False,
            max_consecutive_auto_reply=self.max_tool_rounds,
            is_termination_msg=lambda m: not _asks_for_tools(m),
        )
        assistant = self._create_assistant(requester, history)
        assistant.register_hook("process_message_before_send", self._narration_hook(collector))
        kernel.register_with(caller=assistant, executor=requester)
        return assistant, requester

    def _create_assistant(self, requester: autogen.Agent, history: list[dict[str, Any]]) -> autogen.ConversableAgent:
        return autogen.AssistantAgent(
            name="purchase_order_agent",
            system_message=SYSTEM_PROMPT,
            llm_config=self.llm_config,
            chat_messages={requester: history},
        )

    @staticmethod
    def _narration_hook(collector: TelemetryCollector) -> Callable[..., Any]:
        def hook(sender, message, recipient, silent):
            content = message.get("content") if isinstance(message, dict) else message
            if isinstance(content, str) and content:
                collector.add(AgentNarrative(content))
            return message
        return hook

    def _final_answer(self, history: list[dict[str, Any]]) -> str:
        """Content of the assistant's last message.

        When the tool round limit stops the requester, the last message still asks for
        tools; it is dropped so the stored transcript never ends on unanswered calls.
        """
        if not history:
            return ""
        last = history[-1]
        if _asks_for_tools(last):
            self.logger.warning("Tool round limit (%d) reached before a final answer", self.max_tool_rounds)
            history.pop()
        content = last.get("content")
        return content if isinstance(content, str) else ""

    def memory_for(self, session_id: str) -> dict[str, Any]:
        return WorkflowMemory.from_dict(self.state_store.get_memory(session_id)).to_dict()
