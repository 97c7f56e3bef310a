"""Page routing and the gate in front of the dashboard."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional

import streamlit as st

from config import ROUTE_AUTH, ROUTE_DASHBOARD, ROUTE_LANDING

ROUTES = (ROUTE_LANDING, ROUTE_AUTH, ROUTE_DASHBOARD)


class GuardState(Enum):
    RESOLVING = "resolving"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


def evaluate_guard(ctx) -> GuardState:
    if ctx.resolving:
        return GuardState.RESOLVING
    if ctx.user is None or ctx.profile is None:
        return GuardState.UNAUTHENTICATED
    return GuardState.AUTHENTICATED


def current_route() -> str:
    route = st.session_state.get("route")
    if route not in ROUTES:
        requested = st.query_params.get("page")
        route = requested if requested in ROUTES else ROUTE_LANDING
        st.session_state["route"] = route
    return route


def navigate(route: str, *, replace: bool = False) -> None:
    """Switch page. `replace=True` overwrites the current entry instead of pushing it."""
    if route not in ROUTES:
        raise ValueError(f"Unknown route: {route!r}")
    previous = st.session_state.get("route")
    history = list(st.session_state.get("route_history") or [])
    if not replace and previous in ROUTES and previous != route:
        history.append(previous)
    st.session_state["route_history"] = history
    st.session_state["route"] = route
    st.query_params["page"] = route


def go_back(default: str = ROUTE_LANDING) -> None:
    history = list(st.session_state.get("route_history") or [])
    target = history.pop() if history else default
    st.session_state["route_history"] = history
    st.session_state["route"] = target
    st.query_params["page"] = target


def render_guarded(ctx, render: Callable[[], None], *, loading: Optional[Callable[[], None]] = None) -> GuardState:
    state = evaluate_guard(ctx)
    if state is GuardState.RESOLVING:
        if loading is not None:
            loading()
        return state
    if state is GuardState.UNAUTHENTICATED:
        navigate(ROUTE_AUTH, replace=True)
        st.rerun()
    render()
    return state
