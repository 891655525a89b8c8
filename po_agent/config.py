"""po_agent.config

Settings for the purchase order API, read once from the environment at startup.

Blank variables count as unset, so `FOO=` in a .env file falls back to the default.
"""

from __future__ import annotations
from dataclasses import dataclass
import os

from po_agent.errors import ConfigError
from po_agent.paths import default_catalog_path, resolve_path


def _env(name: str, default: str = "") -> str:
    val = (os.getenv(name) or "").strip()
    return val or default


def _env_bool(name: str, default: bool = False) -> bool:
    val = _env(name)
    if not val:
        return default
    return val.lower() in ("1", "true", "yes", "y", "on")


def _env_int(name: str, default: int, minimum: int | None = None) -> int:
    try:
        val = int(_env(name, str(default)))
    except ValueError:
        val = default
    return max(minimum, val) if minimum is not None else val


@dataclass(frozen=True)
class Settings:
    # Azure OpenAI (auth mode and key are read by po_agent.auth)
    azure_openai_endpoint: str
    azure_openai_chat_deployment: str
    azure_openai_api_version: str

    product_catalog_path: str

    # Session + agent loop
    session_cookie_name: str
    max_tool_rounds: int
    default_debug: bool

    log_dir: str
    log_level: str

    # uvicorn bind, and where the demo UI finds the API
    api_host: str
    api_port: int
    api_base_url: str

    @staticmethod
    def load() -> "Settings":
        catalog = _env("PRODUCT_CATALOG_PATH")
        return Settings(
            azure_openai_endpoint=_env("AZURE_OPENAI_ENDPOINT"),
            azure_openai_chat_deployment=_env("AZURE_OPENAI_CHAT_DEPLOYMENT"),
            azure_openai_api_version=_env("AZURE_OPENAI_API_VERSION", "2024-12-01-preview"),
            product_catalog_path=str(resolve_path(catalog) if catalog else default_catalog_path()),
            session_cookie_name=_env("SESSION_COOKIE_NAME", "SessionId"),
            max_tool_rounds=_env_int("MAX_TOOL_ROUNDS", 8, minimum=1),
            default_debug=_env_bool("DEFAULT_DEBUG"),
            log_dir=str(resolve_path(_env("LOG_DIR", "logs"))),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            api_host=_env("API_HOST", "127.0.0.1"),
            api_port=_env_int("API_PORT", 8000),
            api_base_url=_env("API_BASE_URL", "http://127.0.0.1:8000"),
        )

    def validate(self) -> None:
        """Fail fast before the chat client is built."""
        missing = [
            name
            for name, value in (
                ("AZURE_OPENAI_ENDPOINT", self.azure_openai_endpoint),
                ("AZURE_OPENAI_CHAT_DEPLOYMENT", self.azure_openai_chat_deployment),
            )
            if not value
        ]
        if missing:
            raise ConfigError(f"Missing required settings: {', '.join(missing)}")
