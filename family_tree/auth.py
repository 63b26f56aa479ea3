"""
Shared-password gate.

The flag lives in the session state mapping (st.session_state in the app) and
is kept apart from the tree and visibility state. Logging out also drops any
loaded tree so the next login starts from a fresh load.
"""

from __future__ import annotations

import hmac
import logging
from typing import MutableMapping

logger = logging.getLogger(__name__)

AUTH_KEY = "authenticated"

# Session keys owned by the loaded tree; cleared on logout
TREE_STATE_KEYS = ("records", "root", "expanded", "load_error", "warnings")


def init_auth(state: MutableMapping) -> bool:
    """Set up the flag on first run and return its current value."""
    if AUTH_KEY not in state:
        state[AUTH_KEY] = False
    return bool(state[AUTH_KEY])


def is_authenticated(state: MutableMapping) -> bool:
    return bool(state.get(AUTH_KEY, False))


def login(state: MutableMapping, password: str, expected: str) -> bool:
    """
    Compare `password` to the configured one and set the flag on a match.

    An empty configured password never matches.
    """
    if not expected:
        logger.warning("Login attempted but no password is configured")
        return False
    ok = hmac.compare_digest(password.encode("utf-8"), expected.encode("utf-8"))
    state[AUTH_KEY] = ok
    if not ok:
        logger.info("Rejected login attempt")
    return ok


def logout(state: MutableMapping) -> None:
    state[AUTH_KEY] = False
    for key in TREE_STATE_KEYS:
        state.pop(key, None)
