"""po_agent.auth

Credentials for the Azure OpenAI client.

AZURE_OPENAI_AUTH_MODE selects how the chat service authenticates:
  - apikey: AZURE_OPENAI_API_KEY is required
  - msi:    managed identity (AZURE_MSI_CLIENT_ID for a user-assigned identity)
  - auto:   apikey when a key is configured, msi otherwise (default)

Keys belong in `.env` or the host's secret store, never in the repo.
"""

from __future__ import annotations

import os
from typing import Any, Literal

from azure.identity import ManagedIdentityCredential, get_bearer_token_provider

from po_agent.errors import ConfigError

AuthMode = Literal["apikey", "msi"]

COGNITIVE_SERVICES_SCOPE = "https://cognitiveservices.azure.com/.default"


def _read(name: str) -> str | None:
    v = (os.getenv(name) or "").strip()
    return v or None


def resolve_auth_mode() -> AuthMode:
    requested = (_read("AZURE_OPENAI_AUTH_MODE") or "auto").lower()
    if requested == "apikey":
        return "apikey"
    if requested == "msi":
        return "msi"
    if requested != "auto":
        raise ConfigError(f"Unsupported AZURE_OPENAI_AUTH_MODE: {requested}")
    return "apikey" if _read("AZURE_OPENAI_API_KEY") else "msi"


def managed_identity() -> ManagedIdentityCredential:
    client_id = _read("AZURE_MSI_CLIENT_ID")
    return ManagedIdentityCredential(client_id=client_id) if client_id else ManagedIdentityCredential()


def get_aoai_client_kwargs() -> dict[str, Any]:
    """Auth kwargs for openai.AzureOpenAI: `api_key` or `azure_ad_token_provider`."""
    if resolve_auth_mode() == "apikey":
        key = _read("AZURE_OPENAI_API_KEY")
        if not key:
            raise ConfigError("AZURE_OPENAI_AUTH_MODE=apikey but AZURE_OPENAI_API_KEY is missing")
        return {"api_key": key}
    return {"azure_ad_token_provider": get_bearer_token_provider(managed_identity(), COGNITIVE_SERVICES_SCOPE)}


def get_llm_config_auth() -> dict[str, Any]:
    """Auth entries for an AutoGen LLM config entry.

    MSI goes through AutoGen's `azure_ad_token_provider="DEFAULT"` (DefaultAzureCredential);
    a user-assigned identity is selected by exporting AZURE_CLIENT_ID.
    """
    if resolve_auth_mode() == "apikey":
        return {"api_key": get_aoai_client_kwargs()["api_key"]}
    client_id = _read("AZURE_MSI_CLIENT_ID")
    if client_id:
        os.environ["AZURE_CLIENT_ID"] = client_id
    return {"azure_ad_token_provider": "DEFAULT"}
