import os

import streamlit as st


def _safe_secret(key: str, default: str | None = None) -> str | None:
    try:
        return st.secrets.get(key, default)
    except Exception:
        return default


def _setting(key: str, default: str = "") -> str:
    """Streamlit secrets first, then the environment."""
    value = _safe_secret(key) or os.getenv(key, default)
    return str(value or "").strip()


# ============================================================
# APP
# ============================================================
APP_NAME = "EduConnect"
APP_TAGLINE = "Connect students and teachers"
APP_ICON = "📘"

# ============================================================
# SUPABASE
# ============================================================
# Anon key: every query runs as the signed-in user so
# the row-level policies in schema.py apply.
SUPABASE_URL = _setting("SUPABASE_URL")
SUPABASE_ANON_KEY = _setting("SUPABASE_ANON_KEY")

# Only needed by tools/bootstrap_schema.py
DATABASE_URL = _setting("DATABASE_URL")

PROFILES_TABLE = "profiles"
QUESTIONS_TABLE = "questions"
ANSWERS_TABLE = "answers"

# ============================================================
# DOMAIN
# ============================================================
ROLE_STUDENT = "student"
ROLE_TEACHER = "teacher"
ROLES = (ROLE_STUDENT, ROLE_TEACHER)

STATUS_PENDING = "pending"
STATUS_ANSWERED = "answered"

ROUTE_LANDING = "landing"
ROUTE_AUTH = "auth"
ROUTE_DASHBOARD = "dashboard"

# ============================================================
# LIVE UPDATES
# ============================================================
try:
    LIVE_UPDATES_INTERVAL_MS = max(1000, int(_setting("LIVE_UPDATES_INTERVAL_MS", "5000")))
except ValueError:
    LIVE_UPDATES_INTERVAL_MS = 5000

LOG_FILE = _setting("EDUCONNECT_LOG_FILE", "educonnect_app.log")

# IANA zone used for dates shown in the dashboards
DISPLAY_TIMEZONE = _setting("DISPLAY_TIMEZONE", "UTC")
