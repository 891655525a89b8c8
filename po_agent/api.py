"""po_agent.api

FastAPI surface for the purchase order agent.

Routes (all under /PurchaseOrderRequest):
- GET    ""                        health check, returns "OK"
- POST   "/ProcessPurchaseRequest" run one agent turn for the caller's session
- DELETE "/Session"                forget the caller's transcript and memory

The session id travels in a cookie; a new id is issued when the cookie is absent.
Handlers are sync: the agent blocks on the model, so FastAPI runs them in its thread pool.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import APIRouter, Body, FastAPI, Header, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from po_agent.agent import PurchaseOrderAgent, history_dto, parse_agent_reply
from po_agent.config import Settings
from po_agent.contracts.models import AgentResponse, DebugInfo
from po_agent.contracts.tool_base import StateStore
from po_agent.errors import AppError
from po_agent.step_reducer import reduce_steps
from po_agent.telemetry import TelemetryCollector

EMPTY_PROMPT_MESSAGE = "Prompt cannot be empty or null."


@dataclass
class Services:
    """Process-wide collaborators built once at startup."""
    settings: Settings
    logger: Any
    agent: PurchaseOrderAgent
    state_store: StateStore


def _prompt_from_body(body: Any) -> str:
    if isinstance(body, str):
        return body
    if isinstance(body, dict):
        value = body.get("prompt")
        return value if isinstance(value, str) else ""
    return ""


def _debug_requested(header: Optional[str], default: bool) -> bool:
    if header is None:
        return default
    return header.strip().lower() in ("1", "true", "yes")


def create_app(services: Services) -> FastAPI:
    settings = services.settings
    logger = services.logger
    cookie_name = settings.session_cookie_name

    app = FastAPI(title="Purchase Order Agent API")
    router = APIRouter(prefix="/PurchaseOrderRequest")

    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError):
        logger.error("Request %s failed: %s", request.url.path, exc)
        return PlainTextResponse(
            f"An error occurred while processing your request: {exc}", status_code=exc.http_status
        )

    @router.get("", response_class=PlainTextResponse)
    def health_check() -> str:
        return "OK"

    @router.post("/ProcessPurchaseRequest")
    def process_purchase_request(
        request: Request,
        body: Any = Body(None),
        showdebug: Optional[str] = Header(None),
    ):
        prompt = _prompt_from_body(body)
        logger.info("Logging user prompt for PO Request: %s", prompt)
        if not prompt or not prompt.strip():
            logger.warning("Empty or null prompt received.")
            return PlainTextResponse(EMPTY_PROMPT_MESSAGE, status_code=400)
        prompt = prompt.strip()

        session_id = request.cookies.get(cookie_name) or str(uuid.uuid4())
        collector = TelemetryCollector()
        completion, history = services.agent.process_user_request(prompt, session_id, collector)

        steps = reduce_steps(collector.get_all(), logger)
        reply = parse_agent_reply(completion)

        debug_info = None
        if _debug_requested(showdebug, settings.default_debug):
            debug_info = DebugInfo(
                session_id=session_id,
                history=history_dto(history),
                telemetry=collector.describe(),
                tool_steps=steps,
                memory=services.agent.memory_for(session_id),
            )

        out = AgentResponse(
            reflection=reply.reflection,
            user_prompt=reply.user_prompt,
            products=reply.products,
            next_step=reply.next_step,
            debug_info=debug_info,
        )
        logger.info("User prompt processed successfully (%d tool steps)", len(steps))

        response = JSONResponse(out.to_dict())
        response.set_cookie(cookie_name, session_id, httponly=True, samesite="lax")
        return response

    @router.delete("/Session")
    def clear_session(request: Request):
        session_id = request.cookies.get(cookie_name)
        if session_id:
            services.state_store.delete_chat_history(session_id)
        return {"sessionId": session_id, "cleared": True}

    app.include_router(router)
    return app
