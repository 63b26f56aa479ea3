"""
Settings for the family tree viewer.

Values come from Streamlit secrets first and environment variables second,
so the same keys work in `.streamlit/secrets.toml` and in a shell.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional


DEFAULT_TABLE = "family_members"
DEFAULT_TITLE = "Family Tree"
DEFAULT_RANKDIR = "TB"
DEFAULT_REQUEST_TIMEOUT = 30.0

# Diagram direction labels shown in the sidebar
RANKDIR_OPTIONS = {
    "Top → Bottom": "TB",
    "Left → Right": "LR",
}


@dataclass(frozen=True)
class AppConfig:
    supabase_url: str = ""
    supabase_key: str = ""
    table: str = DEFAULT_TABLE
    password: str = ""
    title: str = DEFAULT_TITLE
    records_csv: str = ""
    graphviz_api_url: str = ""
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


def _lookup(key: str, secrets: Mapping[str, Any], environ: Mapping[str, str]) -> Optional[str]:
    try:
        value = secrets.get(key)
    except FileNotFoundError:
        # st.secrets raises this when no secrets.toml exists
        value = None
    if value in (None, ""):
        value = environ.get(key)
    if value in (None, ""):
        return None
    return str(value).strip()


def load_config(secrets: Mapping[str, Any], environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Build an AppConfig from a secrets mapping (e.g. st.secrets) and the environment."""
    env = os.environ if environ is None else environ

    def get(key: str, default: str = "") -> str:
        value = _lookup(key, secrets, env)
        return default if value is None else value

    timeout_text = get("REQUEST_TIMEOUT")
    try:
        timeout = float(timeout_text) if timeout_text else DEFAULT_REQUEST_TIMEOUT
    except ValueError:
        raise ValueError(f"REQUEST_TIMEOUT must be a number, got {timeout_text!r}") from None

    return AppConfig(
        supabase_url=get("SUPABASE_URL"),
        supabase_key=get("SUPABASE_KEY"),
        table=get("FAMILY_TABLE", DEFAULT_TABLE),
        password=get("FAMILY_TREE_PASSWORD"),
        title=get("FAMILY_TREE_TITLE", DEFAULT_TITLE),
        records_csv=get("RECORDS_CSV"),
        graphviz_api_url=get("GRAPHVIZ_API_URL"),
        request_timeout=timeout,
    )
