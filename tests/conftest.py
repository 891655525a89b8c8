import logging

import autogen
import pytest

from po_agent.agent import PurchaseOrderAgent
from po_agent.contracts.tool_base import PromptService
from po_agent.storage.product_repository import JsonProductRepository
from po_agent.storage.state_store import InMemoryStateStore


class ScriptedPromptService(PromptService):
    """Replays canned prompt outputs in order."""

    def __init__(self, prompt_replies=None):
        self.prompt_replies = list(prompt_replies or [])
        self.prompts: list[str] = []

    def complete_prompt(self, prompt):
        self.prompts.append(prompt)
        reply = self.prompt_replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class ScriptedPurchaseOrderAgent(PurchaseOrderAgent):
    """Assistant replies come from a script instead of the model; AutoGen still runs the tools."""

    def __init__(self, *args, replies=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.replies = list(replies or [])
        self.seen: list[list[dict]] = []
        self.tools_offered: list[str] = []

    def _create_assistant(self, requester, history):
        assistant = super()._create_assistant(requester, history)

        def scripted(recipient, messages=None, sender=None, config=None):
            self.seen.append([dict(m) for m in messages or []])
            self.tools_offered = [t["function"]["name"] for t in recipient.llm_config["tools"]]
            reply = self.replies.pop(0)
            if isinstance(reply, Exception):
                raise reply
            return True, reply

        assistant.register_reply([autogen.Agent, None], scripted, position=0)
        return assistant


def dummy_llm_config():
    return autogen.LLMConfig({"model": "gpt-test", "api_key": "sk-test"})


def tool_call(name, arguments="{}", call_id="call_1", content=None):
    return {
        "role": "assistant",
        "content": content,
        "tool_calls": [{"id": call_id, "type": "function", "function": {"name": name, "arguments": arguments}}],
    }


def final(text):
    return {"role": "assistant", "content": text}


@pytest.fixture
def logger():
    return logging.getLogger("po_agent.tests")


@pytest.fixture
def products():
    return JsonProductRepository.from_file()


@pytest.fixture
def state_store(logger):
    return InMemoryStateStore(logger)
