import logging

import streamlit as st
from streamlit_autorefresh import st_autorefresh

from auth import reset_session_context
from components.ui import render_empty_state, render_loading
from config import APP_NAME, LIVE_UPDATES_INTERVAL_MS
from db import fetch_rows
from realtime import ChangeFeed, SubscriptionScope
from ui_student import QUESTIONS_KEY as STUDENT_QUESTIONS_KEY
from ui_student import TEACHERS_KEY, render_student_page, student_subscriptions
from ui_teacher import QUESTIONS_KEY as TEACHER_QUESTIONS_KEY
from ui_teacher import render_teacher_page, teacher_subscriptions
from view_state import clear_view_state, mark_stale

LOGGER = logging.getLogger("educonnect")

SESSION_KEYS_ON_SIGN_OUT = (
    "student_submit_tracker",
    "teacher_answer_tracker",
    "student_question_text",
    "student_teacher_choice",
)


# ============================================================
# LIVE UPDATES
# ============================================================
def get_change_feed() -> ChangeFeed:
    feed = st.session_state.get("change_feed")
    if feed is None:
        feed = ChangeFeed(lambda table, filters, columns: fetch_rows(table, filters, columns))
        st.session_state["change_feed"] = feed
    return feed


def _scope() -> SubscriptionScope:
    scope = st.session_state.get("view_subscriptions")
    if scope is None:
        scope = SubscriptionScope()
        st.session_state["view_subscriptions"] = scope
    return scope


def unmount_live_updates() -> None:
    scope = st.session_state.get("view_subscriptions")
    if scope is not None and scope.key is not None:
        LOGGER.info("Live updates unmounted", extra={"ctx": {"component": "dashboard", "view": scope.key[0]}})
        scope.dispose()


def _mount_live_updates(profile, user_id: str) -> None:
    feed = get_change_feed()
    if profile.is_student:
        setup = lambda: student_subscriptions(feed, user_id)  # noqa: E731
    else:
        setup = lambda: teacher_subscriptions(feed, user_id)  # noqa: E731
    if _scope().ensure((profile.role, user_id), setup):
        LOGGER.info("Live updates mounted", extra={"ctx": {"component": "dashboard", "view": profile.role, "user_id": user_id}})

    st_autorefresh(interval=LIVE_UPDATES_INTERVAL_MS, key="live_updates_tick")
    feed.poll()


# ============================================================
# CALLBACKS
# ============================================================
def _sign_out_cb(ctx) -> None:
    unmount_live_updates()
    feed = st.session_state.pop("change_feed", None)
    if feed is not None:
        feed.close()
    ctx.sign_out()
    # Next run starts a fresh context on the same client.
    reset_session_context()
    clear_view_state()
    for key in SESSION_KEYS_ON_SIGN_OUT:
        st.session_state.pop(key, None)


def _refresh_cb() -> None:
    mark_stale(STUDENT_QUESTIONS_KEY, TEACHERS_KEY, TEACHER_QUESTIONS_KEY)


# ============================================================
# PAGE
# ============================================================
def _render_diagnostics() -> None:
    with st.expander("Diagnostics"):
        st.button("Refresh now", key="dashboard_refresh", on_click=_refresh_cb)
        if st.session_state.get("db_last_error"):
            st.write("Last backend error:")
            st.code(st.session_state["db_last_error"])
        else:
            st.caption("No backend errors in this session.")


def render_dashboard_page(ctx) -> None:
    if ctx.resolving:
        render_loading("Loading...")
        return

    profile = ctx.profile
    if profile is None:
        render_empty_state("No profile found", "Your account does not have a profile yet.", icon="🪪")
        return

    head, action = st.columns([5, 1])
    with head:
        st.markdown(f"## 📘 {APP_NAME}")
        st.caption(f"Welcome back, {profile.full_name} ({profile.role})")
    with action:
        st.button("🚪 Sign Out", key="sign_out", use_container_width=True, on_click=_sign_out_cb, args=(ctx,))
    st.divider()

    user_id = ctx.user.id if ctx.user is not None else profile.user_id
    _mount_live_updates(profile, user_id)

    if profile.is_student:
        render_student_page(ctx)
    else:
        render_teacher_page(ctx)

    _render_diagnostics()
