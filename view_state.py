"""Per-session cache of what the dashboards last fetched.

Views read through `load_view_data`; anything that changes backend data calls
`mark_stale` so the next read goes back to Supabase.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

import streamlit as st

LOGGER = logging.getLogger("educonnect")

_VIEW_KEYS_INDEX = "view_data_keys"


def _remember(key: str) -> None:
    keys = set(st.session_state.get(_VIEW_KEYS_INDEX) or [])
    keys.add(key)
    st.session_state[_VIEW_KEYS_INDEX] = sorted(keys)


def load_view_data(key: str, owner: str, loader: Callable[[], Optional[List[Any]]], *, error_text: str) -> List[Any]:
    """Return cached rows for `owner`, re-fetching when stale or the owner changed.

    A failed fetch keeps the previous rows for the same owner and shows a toast.
    """
    _remember(key)
    same_owner = st.session_state.get(f"{key}::owner") == owner
    if same_owner and not st.session_state.get(f"{key}::stale", True):
        return st.session_state.get(key) or []

    rows = loader()
    if rows is None:
        LOGGER.warning("View data fetch failed", extra={"ctx": {"component": "view_state", "key": key}})
        st.toast(error_text, icon="🚨")
        if not same_owner:
            st.session_state[key] = []
            st.session_state[f"{key}::owner"] = owner
    else:
        st.session_state[key] = rows
        st.session_state[f"{key}::owner"] = owner
    st.session_state[f"{key}::stale"] = False
    return st.session_state.get(key) or []


def mark_stale(*keys: str) -> None:
    for key in keys:
        st.session_state[f"{key}::stale"] = True


def clear_view_state() -> None:
    for key in st.session_state.get(_VIEW_KEYS_INDEX) or []:
        for k in (key, f"{key}::owner", f"{key}::stale"):
            st.session_state.pop(k, None)
    st.session_state[_VIEW_KEYS_INDEX] = []
