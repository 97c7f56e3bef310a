import streamlit as st

from components.ui import render_callout, render_page_header
from config import APP_NAME, APP_TAGLINE, ROLE_STUDENT, ROLE_TEACHER, ROUTE_DASHBOARD, ROUTE_LANDING
from routing import go_back, navigate

ROLE_LABELS = {
    ROLE_STUDENT: "🧑‍🎓 Student · Learn from expert teachers",
    ROLE_TEACHER: "🧑‍🏫 Teacher · Share knowledge with students",
}


def _back_cb() -> None:
    go_back(ROUTE_LANDING)


def _render_sign_in(ctx) -> None:
    st.markdown("#### Welcome Back")
    st.caption("Sign in to your account to continue learning")
    with st.form("sign_in_form"):
        email = st.text_input("Email", placeholder="Enter your email")
        password = st.text_input("Password", type="password", placeholder="Enter your password")
        submitted = st.form_submit_button("Sign In", type="primary", use_container_width=True)

    if not submitted:
        return
    with st.spinner("Signing In..."):
        result = ctx.sign_in(email, password)
    if result.ok:
        navigate(ROUTE_DASHBOARD)
        st.rerun()
    st.error(result.error or "Sign in failed.")


def _render_sign_up(ctx) -> None:
    st.markdown("#### Create Account")
    st.caption("Join our education platform today")
    # Role select must enable the button immediately, so no st.form.
    full_name = st.text_input("Full Name", placeholder="Enter your full name", key="sign_up_name")
    email = st.text_input("Email", placeholder="Enter your email", key="sign_up_email")
    password = st.text_input("Password", type="password", placeholder="Create a password", key="sign_up_password")
    role = st.selectbox(
        "I am a...",
        list(ROLE_LABELS),
        index=None,
        placeholder="Select your role",
        format_func=lambda r: ROLE_LABELS[r],
        key="sign_up_role",
    )
    submitted = st.button(
        "Create Account",
        type="primary",
        use_container_width=True,
        disabled=role is None,
        key="sign_up_submit",
    )

    if not submitted:
        return
    with st.spinner("Creating Account..."):
        result = ctx.sign_up(email, password, full_name, role)
    if not result.ok:
        st.error(result.error or "Sign up failed.")
        return
    if result.needs_confirmation:
        render_callout(
            "Check your email",
            "We sent you a confirmation link. Confirm your address, then sign in.",
            kind="success",
        )
        return
    navigate(ROUTE_DASHBOARD)
    st.rerun()


def render_auth_page(ctx) -> None:
    st.button("← Back", key="auth_back", on_click=_back_cb)
    render_page_header(f"📘 {APP_NAME}", APP_TAGLINE)
    if ctx.user is not None and ctx.profile is None:
        render_callout(
            "No profile found",
            "You are signed in but your account has no profile yet. Try again shortly or contact your school.",
            kind="warning",
        )

    _, mid, _ = st.columns([1, 2, 1])
    with mid:
        with st.container(border=True):
            tab_in, tab_up = st.tabs(["Sign In", "Sign Up"])
            with tab_in:
                _render_sign_in(ctx)
            with tab_up:
                _render_sign_up(ctx)
