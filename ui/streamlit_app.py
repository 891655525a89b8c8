"""ui.streamlit_app

Streamlit demo client for the purchase order API:
- Chat interface (one API session per browser session via the SessionId cookie)
- Product table when the agent returns products
- Debug mode: one expander per tool step, plus raw telemetry
- "New request" clears the server-side session
"""

from __future__ import annotations

import json
import time

import streamlit as st

from po_agent.config import Settings
from po_agent.env_loader import load_env
from ui.api_client import PurchaseOrderApiClient
from ui.ui_theme import css

SUGGESTED = [
    "I need a new laptop for software development",
    "Show me the supported products",
    "What are the procurement rules?",
]


def _init_state(settings: Settings):
    if "messages" not in st.session_state:
        st.session_state.messages = []
    if "debug" not in st.session_state:
        st.session_state.debug = settings.default_debug
    if "client" not in st.session_state:
        st.session_state.client = PurchaseOrderApiClient(settings.api_base_url)


def _product_rows(products) -> list[dict]:
    if not isinstance(products, list):
        return []
    rows = []
    for p in products:
        if not isinstance(p, dict):
            continue
        specs = p.get("baseSpecs") or {}
        rows.append({
            "SKU": p.get("sku"),
            "Name": p.get("name"),
            "Cost": p.get("cost"),
            "CPU": specs.get("cpu"),
            "RAM": specs.get("ram"),
            "Storage": specs.get("storage"),
        })
    return rows


def _render_message(m: dict):
    with st.chat_message(m.get("role", "assistant")):
        st.markdown(m.get("content", ""))
        if m.get("reflection"):
            st.markdown(f"<div class='po-reflection'>{m['reflection']}</div>", unsafe_allow_html=True)
        if m.get("products"):
            st.dataframe(m["products"], width="stretch")
        if st.session_state.debug and m.get("debug"):
            debug = m["debug"]
            if debug.get("nextStep"):
                st.caption(f"Next step: {debug['nextStep']}")
            for i, step in enumerate(debug.get("toolSteps") or [], start=1):
                with st.expander(f"Step {i}: {step.get('toolName')}", expanded=False):
                    st.code(step.get("jsonResult") or "", language="json")
                    if step.get("agentResponse"):
                        st.markdown(step["agentResponse"])
            if debug.get("memory"):
                with st.expander("Workflow memory", expanded=False):
                    st.code(json.dumps(debug["memory"], indent=2), language="json")
            with st.expander("Raw telemetry", expanded=False):
                st.code("\n\n".join(debug.get("telemetry") or []))


def _send(prompt: str):
    client: PurchaseOrderApiClient = st.session_state.client
    with st.status("Working on your request...", expanded=False) as status:
        start = time.time()
        try:
            body = client.send(prompt, debug=bool(st.session_state.debug))
        except Exception as e:
            status.update(label="Request failed", state="error", expanded=True)
            st.session_state.messages.append({"role": "assistant", "content": f"Request failed: {e}"})
            return
        status.update(label=f"Done • {time.time() - start:.1f}s", state="complete")

    debug = body.get("debugInfo")
    if debug is not None:
        debug = dict(debug, nextStep=body.get("nextStep"))
    st.session_state.messages.append({
        "role": "assistant",
        "content": body.get("userPrompt") or body.get("reflection") or "",
        "reflection": body.get("reflection") if body.get("userPrompt") else None,
        "products": _product_rows(body.get("products")),
        "debug": debug,
    })


def main():
    load_env()
    settings = Settings.load()
    _init_state(settings)

    st.set_page_config(page_title="Purchase Order Agent", page_icon="🛒", layout="wide")
    st.markdown(css(), unsafe_allow_html=True)
    st.markdown(
        "<div class='po-header'><span class='po-badge'>🛒 Procurement</span>"
        "<b>Purchase Order Agent</b>"
        "<span class='po-muted'>Workplace computer requests</span></div>",
        unsafe_allow_html=True,
    )

    client: PurchaseOrderApiClient = st.session_state.client
    with st.sidebar:
        st.markdown("### Settings")
        st.session_state.debug = st.toggle("Debug mode", value=st.session_state.debug)
        st.caption(f"API: {settings.api_base_url} ({'up' if client.health() else 'unreachable'})")
        if client.session_id:
            st.caption(f"Session: {client.session_id}")
        if st.button("New request", width="stretch"):
            client.reset()
            st.session_state.messages = []
            st.rerun()

    for m in st.session_state.messages:
        _render_message(m)

    if not st.session_state.messages:
        cols = st.columns(len(SUGGESTED))
        for i, text in enumerate(SUGGESTED):
            if cols[i].button(text, width="stretch"):
                st.session_state.messages.append({"role": "user", "content": text})
                _send(text)
                st.rerun()

    prompt = st.chat_input("Describe what you need...")
    if prompt:
        st.session_state.messages.append({"role": "user", "content": prompt})
        _send(prompt)
        st.rerun()


if __name__ == "__main__":
    main()
