"""Session context: who is signed in, and their profile.

One `SessionContext` lives in st.session_state per browser session. Pages read
`user`, `profile` and `resolving`; only the context's own methods change them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import streamlit as st

from config import ROLES
from db import fetch_profile, get_supabase_client
from models import Profile

LOGGER = logging.getLogger("educonnect")


@dataclass(frozen=True)
class Identity:
    id: str
    email: str = ""


@dataclass(frozen=True)
class AuthResult:
    ok: bool
    error: Optional[str] = None
    needs_confirmation: bool = False


# ============================================================
# VALIDATION (before any request is issued)
# ============================================================
def validate_sign_in(email: str, password: str) -> Optional[str]:
    if not (email or "").strip() or not password:
        return "Please enter both email and password."
    return None


def validate_sign_up(email: str, password: str, full_name: str, role: Optional[str]) -> Optional[str]:
    if not (full_name or "").strip():
        return "Please enter your full name."
    if not (email or "").strip() or not password:
        return "Please enter both email and password."
    if role not in ROLES:
        return "Please choose your role: student or teacher."
    return None


def _auth_error_message(e: Exception) -> str:
    msg = getattr(e, "message", None) or str(e)
    return msg.strip() or type(e).__name__


def _identity_from(user: Any) -> Optional[Identity]:
    if user is None:
        return None
    user_id = getattr(user, "id", None)
    if not user_id:
        return None
    return Identity(id=str(user_id), email=str(getattr(user, "email", "") or ""))


class SessionContext:
    def __init__(self, client):
        self._client = client
        self._user: Optional[Identity] = None
        self._profile: Optional[Profile] = None
        self._resolving = True
        self._listener = None

    # ---------- read accessors ----------
    @property
    def user(self) -> Optional[Identity]:
        return self._user

    @property
    def profile(self) -> Optional[Profile]:
        return self._profile

    @property
    def resolving(self) -> bool:
        return self._resolving

    @property
    def client(self):
        return self._client

    # ---------- lifecycle ----------
    def start(self) -> None:
        """Resolve the stored session and follow auth-state changes."""
        if self._listener is None and self._client is not None:
            try:
                self._listener = self._client.auth.on_auth_state_change(self._on_auth_state_change)
            except Exception as e:
                LOGGER.warning("Auth listener unavailable", extra={"ctx": {"component": "auth", "error": type(e).__name__}})
        self.resolve()

    def stop(self) -> None:
        listener, self._listener = self._listener, None
        if listener is None:
            return
        try:
            listener.unsubscribe()
        except Exception as e:
            LOGGER.warning("Auth listener unsubscribe failed", extra={"ctx": {"component": "auth", "error": type(e).__name__}})

    def resolve(self) -> None:
        session = None
        if self._client is not None:
            try:
                session = self._client.auth.get_session()
            except Exception as e:
                LOGGER.warning("Session lookup failed", extra={"ctx": {"component": "auth", "error": type(e).__name__}})
        self._apply(getattr(session, "user", None))
        self._resolving = False

    def _on_auth_state_change(self, event: str, session: Any) -> None:
        """Follow the auth client's events.

        Token refreshes arrive on the client's own timer thread, where
        st.session_state is off limits, so only SIGNED_IN reaches the backend.
        """
        LOGGER.info("Auth state changed", extra={"ctx": {"component": "auth", "event": event}})
        if event == "SIGNED_OUT":
            self._clear()
        elif event == "SIGNED_IN":
            self._apply(getattr(session, "user", None))
        else:
            identity = _identity_from(getattr(session, "user", None))
            if identity is not None and self._user is not None and identity.id == self._user.id:
                self._user = identity
        self._resolving = False

    def _apply(self, user: Any) -> None:
        identity = _identity_from(user)
        if identity is None:
            self._clear()
            return
        if self._user == identity and self._profile is not None:
            return
        self._user = identity
        row = fetch_profile(identity.id, sb=self._client)
        self._profile = Profile.from_row(row) if row else None
        if self._profile is None:
            LOGGER.warning("No profile for user", extra={"ctx": {"component": "auth", "user_id": identity.id}})

    def _clear(self) -> None:
        self._user = None
        self._profile = None

    # ---------- mutating operations ----------
    def sign_in(self, email: str, password: str) -> AuthResult:
        err = validate_sign_in(email, password)
        if err:
            return AuthResult(ok=False, error=err)
        if self._client is None:
            return AuthResult(ok=False, error="Authentication is not configured.")
        try:
            res = self._client.auth.sign_in_with_password({"email": email.strip(), "password": password})
        except Exception as e:
            LOGGER.warning("Sign in failed", extra={"ctx": {"component": "auth", "error": type(e).__name__}})
            return AuthResult(ok=False, error=_auth_error_message(e))

        self._apply(getattr(res, "user", None))
        self._resolving = False
        if self._user is None:
            return AuthResult(ok=False, error="Sign in did not return a user.")
        LOGGER.info("Signed in", extra={"ctx": {"component": "auth", "user_id": self._user.id}})
        return AuthResult(ok=True)

    def sign_up(self, email: str, password: str, full_name: str, role: Optional[str]) -> AuthResult:
        err = validate_sign_up(email, password, full_name, role)
        if err:
            return AuthResult(ok=False, error=err)
        if self._client is None:
            return AuthResult(ok=False, error="Authentication is not configured.")
        try:
            res = self._client.auth.sign_up({
                "email": email.strip(),
                "password": password,
                "options": {"data": {"full_name": full_name.strip(), "role": role}},
            })
        except Exception as e:
            LOGGER.warning("Sign up failed", extra={"ctx": {"component": "auth", "error": type(e).__name__}})
            return AuthResult(ok=False, error=_auth_error_message(e))

        if getattr(res, "session", None) is None:
            # Account exists but stays unusable until the email is confirmed.
            LOGGER.info("Sign up awaiting confirmation", extra={"ctx": {"component": "auth", "role": role}})
            return AuthResult(ok=True, needs_confirmation=True)

        self._apply(getattr(res, "user", None))
        self._resolving = False
        LOGGER.info("Signed up", extra={"ctx": {"component": "auth", "role": role}})
        return AuthResult(ok=True)

    def sign_out(self) -> None:
        if self._user is None and self._profile is None:
            return
        user_id = self._user.id if self._user else None
        try:
            if self._client is not None:
                self._client.auth.sign_out()
        except Exception as e:
            LOGGER.warning("Sign out request failed", extra={"ctx": {"component": "auth", "error": type(e).__name__}})
        finally:
            self._clear()
        LOGGER.info("Signed out", extra={"ctx": {"component": "auth", "user_id": user_id}})


# ============================================================
# PER-BROWSER-SESSION INSTANCE
# ============================================================
def get_session_context() -> SessionContext:
    ctx = st.session_state.get("session_context")
    if ctx is None:
        ctx = SessionContext(get_supabase_client())
        st.session_state["session_context"] = ctx
        ctx.start()
    return ctx


def reset_session_context() -> None:
    ctx = st.session_state.pop("session_context", None)
    if ctx is not None:
        ctx.stop()
