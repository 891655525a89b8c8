"""ui.api_client

Thin HTTP client for the purchase order API.

The httpx.Client keeps its cookie jar between calls, so the SessionId cookie set by
the first response carries the conversation across turns.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

BASE_PATH = "/PurchaseOrderRequest"


class PurchaseOrderApiClient:
    def __init__(self, base_url: str, timeout: float = 120.0, transport: Optional[httpx.BaseTransport] = None):
        self._client = httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)

    @property
    def session_id(self) -> Optional[str]:
        return self._client.cookies.get("SessionId")

    def health(self) -> bool:
        try:
            resp = self._client.get(BASE_PATH)
        except httpx.HTTPError:
            return False
        return resp.status_code == 200 and resp.text.strip('"') == "OK"

    def send(self, prompt: str, debug: bool = False) -> dict[str, Any]:
        headers = {"showdebug": "true"} if debug else {}
        resp = self._client.post(f"{BASE_PATH}/ProcessPurchaseRequest", json=prompt, headers=headers)
        if resp.status_code != 200:
            raise RuntimeError(f"API returned {resp.status_code}: {resp.text}")
        return resp.json()

    def reset(self) -> None:
        self._client.delete(f"{BASE_PATH}/Session").raise_for_status()
        self._client.cookies.clear()

    def close(self) -> None:
        self._client.close()
