"""ui.ui_theme

Colours and CSS for the procurement demo page.
"""

PALETTE = {
    "accent": "#0F6CBD",
    "border": "#e1e4e8",
    "muted": "#5c5c5c",
    "ok": "#107C10",
    "warn": "#C50F1F",
}


def css() -> str:
    p = PALETTE
    return f"""
    <style>
    .po-header {{
        display: flex;
        align-items: baseline;
        gap: 10px;
        padding: 6px 0 10px 0;
        border-bottom: 2px solid {p["accent"]};
        margin-bottom: 12px;
    }}
    .po-badge {{
        border: 1px solid {p["accent"]};
        color: {p["accent"]};
        border-radius: 4px;
        padding: 0 6px;
        font-size: 12px;
        font-weight: 600;
    }}
    .po-muted {{ color: {p["muted"]}; font-size: 13px; }}
    .po-reflection {{
        color: {p["muted"]};
        font-size: 13px;
        font-style: italic;
        border-left: 3px solid {p["border"]};
        padding-left: 8px;
    }}
    </style>
    """
