"""po_agent.tools.azure_openai_tool

Azure OpenAI access supporting **MSI or API key** authentication.

- `build_llm_config` returns the AutoGen LLM config the assistant agent runs on.
- `AzureOpenAIChatService.complete_prompt` runs one rendered tool prompt through the
  openai client and returns the raw text; tools parse it.

Pattern:
  msi = ManagedIdentityCredential(client_id=AZURE_MSI_CLIENT_ID)
  token_provider = get_bearer_token_provider(msi, "https://cognitiveservices.azure.com/.default")
  client = AzureOpenAI(azure_endpoint=..., api_version=..., azure_ad_token_provider=token_provider)
"""

from __future__ import annotations

import autogen
from openai import AzureOpenAI, OpenAIError

from po_agent.auth import get_aoai_client_kwargs, get_llm_config_auth
from po_agent.contracts.tool_base import PromptService
from po_agent.errors import ToolError


def build_llm_config(endpoint: str, chat_deployment: str, api_version: str, temperature: float = 0.0) -> autogen.LLMConfig:
    if not endpoint.endswith("/"):
        endpoint += "/"
    cfg = {
        "model": chat_deployment,
        "base_url": endpoint,
        "api_type": "azure",
        "api_version": api_version,
        "temperature": temperature,
    }
    cfg.update(get_llm_config_auth())
    return autogen.LLMConfig(cfg)


class AzureOpenAIChatService(PromptService):
    """LLM client wrapper around a single chat deployment."""

    def __init__(self, endpoint: str, chat_deployment: str, api_version: str, logger, temperature: float = 0.0):
        self.endpoint = endpoint
        self.chat_deployment = chat_deployment
        self.temperature = temperature
        self.logger = logger

        self.client = AzureOpenAI(
            api_version=api_version,
            azure_endpoint=self.endpoint,
            **get_aoai_client_kwargs(),
        )

    def complete_prompt(self, prompt: str) -> str:
        try:
            resp = self.client.chat.completions.create(
                model=self.chat_deployment,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
            )
        except OpenAIError as e:
            raise ToolError(f"Prompt execution failed: {e}") from e
        text = resp.choices[0].message.content or ""
        self.logger.debug("Prompt output: %s", text[:500])
        return text
