"""po_agent.env_loader

`.env` loading for local runs, built on python-dotenv.

Lookup: an explicit path if given, otherwise the nearest `.env` above the CWD,
otherwise `<repo>/.env`. Variables already present in the process win unless
`override=True`, so deployment settings are never shadowed by a stray file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from po_agent.paths import project_root


def locate_env_file(dotenv_path: str | None = None) -> Optional[Path]:
    if dotenv_path:
        explicit = Path(dotenv_path).expanduser()
        return explicit if explicit.is_file() else None

    found = find_dotenv(usecwd=True)
    if found:
        return Path(found)

    fallback = project_root() / ".env"
    return fallback if fallback.is_file() else None


def load_env(dotenv_path: str | None = None, override: bool = False) -> str | None:
    """Load variables from the located `.env`; returns its path, or None when there is none."""
    path = locate_env_file(dotenv_path)
    if path is None:
        return None
    load_dotenv(dotenv_path=path, override=override)
    return str(path)
