"""po_agent.contracts.tool_base

Interfaces for external systems: the hosted model, session state and the product catalog.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

from .models import Product


class PromptService(ABC):
    @abstractmethod
    def complete_prompt(self, prompt: str) -> str:
        """Run a single rendered prompt and return the raw text."""
        raise NotImplementedError


class StateStore(ABC):
    """Transcripts are AutoGen message dicts, as the assistant agent keeps them."""

    @abstractmethod
    def get_chat_history(self, session_id: str) -> Optional[list[dict[str, Any]]]:
        raise NotImplementedError

    @abstractmethod
    def save_chat_history(self, session_id: str, history: list[dict[str, Any]]) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete_chat_history(self, session_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_memory(self, session_id: str) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def save_memory(self, session_id: str, memory: dict[str, Any]) -> None:
        raise NotImplementedError


class ProductRepository(ABC):
    @abstractmethod
    def get_by_skus(self, skus: Iterable[str]) -> list[Product]:
        raise NotImplementedError

    @abstractmethod
    def get_all(self) -> list[Product]:
        raise NotImplementedError

    @abstractmethod
    def get_summary_view(self) -> list[Product]:
        raise NotImplementedError
