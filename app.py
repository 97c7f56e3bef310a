import streamlit as st

from auth import get_session_context
from components.ui import inject_css, render_callout, render_loading
from config import APP_ICON, APP_NAME, LOG_FILE, ROUTE_AUTH, ROUTE_DASHBOARD, SUPABASE_ANON_KEY, SUPABASE_URL
from routing import GuardState, current_route, evaluate_guard, navigate, render_guarded
from ui_auth import render_auth_page
from ui_dashboard import render_dashboard_page, unmount_live_updates
from ui_landing import render_landing_page
from utils.logging_utils import setup_logging

LOGGER = setup_logging(LOG_FILE)

# =========================
# --- PAGE CONFIG ---
# =========================
st.set_page_config(
    page_title=APP_NAME,
    page_icon=APP_ICON,
    layout="wide",
)
inject_css()


def _ss_init(k: str, v):
    if k not in st.session_state:
        st.session_state[k] = v


_ss_init("db_last_error", "")

# =========================
# --- CONFIG CHECK ---
# =========================
if not SUPABASE_URL or not SUPABASE_ANON_KEY:
    LOGGER.error("Supabase not configured", extra={"ctx": {"component": "startup"}})
    render_callout(
        "Supabase is not configured",
        "Set SUPABASE_URL and SUPABASE_ANON_KEY in .streamlit/secrets.toml or the environment, then reload.",
        kind="error",
    )
    st.stop()

ctx = get_session_context()
if ctx.client is None:
    render_callout("Could not connect to Supabase", st.session_state.get("db_last_error") or "Unknown error.", kind="error")
    st.stop()

# ============================================================
# ROUTER
# ============================================================
route = current_route()

if route != ROUTE_DASHBOARD:
    unmount_live_updates()

if route == ROUTE_DASHBOARD:
    render_guarded(ctx, lambda: render_dashboard_page(ctx), loading=lambda: render_loading("Loading..."))
elif route == ROUTE_AUTH:
    if evaluate_guard(ctx) is GuardState.AUTHENTICATED:
        navigate(ROUTE_DASHBOARD, replace=True)
        st.rerun()
    render_auth_page(ctx)
else:
    render_landing_page()
