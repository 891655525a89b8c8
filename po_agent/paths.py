"""po_agent.paths

Repo-relative paths, so uvicorn and Streamlit resolve the same files from any CWD.
"""

from __future__ import annotations
from pathlib import Path


def project_root() -> Path:
    """Folder that holds `po_agent/`, `data/` and `.env`."""
    return Path(__file__).resolve().parents[1]


def default_catalog_path() -> Path:
    return project_root() / "data" / "products.json"


def resolve_path(value: str | Path) -> Path:
    """Relative paths are taken from the repo root, not the process CWD."""
    p = Path(value).expanduser()
    return p if p.is_absolute() else project_root() / p
