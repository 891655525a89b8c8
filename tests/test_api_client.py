import json

import httpx
import pytest

from ui.api_client import PurchaseOrderApiClient


def make_client(handler):
    return PurchaseOrderApiClient("http://api.local/", transport=httpx.MockTransport(handler))


def test_send_posts_json_string_and_keeps_cookie():
    seen = []

    def handler(request: httpx.Request):
        seen.append(request)
        return httpx.Response(
            200,
            json={"reflection": "r", "userPrompt": "u", "products": None},
            headers={"set-cookie": "SessionId=abc; HttpOnly; SameSite=Lax; Path=/"},
        )

    client = make_client(handler)
    assert client.send("need a laptop", debug=True)["userPrompt"] == "u"
    client.send("again")

    assert json.loads(seen[0].content) == "need a laptop"
    assert seen[0].headers["showdebug"] == "true"
    assert "showdebug" not in seen[1].headers
    assert "SessionId=abc" in seen[1].headers["cookie"]
    assert client.session_id == "abc"


def test_send_raises_on_error_status():
    client = make_client(lambda request: httpx.Response(400, text="Prompt cannot be empty or null."))
    with pytest.raises(RuntimeError, match="400"):
        client.send("")


def test_health_handles_connection_errors():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    assert make_client(handler).health() is False
    assert make_client(lambda request: httpx.Response(200, text="OK")).health() is True
