import logging
from typing import Any, Dict, List, Optional

import streamlit as st

from config import (
    ANSWERS_TABLE,
    PROFILES_TABLE,
    QUESTIONS_TABLE,
    ROLE_TEACHER,
    STATUS_ANSWERED,
    STATUS_PENDING,
    SUPABASE_ANON_KEY,
    SUPABASE_URL,
)

LOGGER = logging.getLogger("educonnect")

# ============================================================
#  PROJECTIONS
#   Embedded profiles are disambiguated by foreign key name because
#   questions reference profiles twice (student and teacher).
# ============================================================
STUDENT_QUESTIONS_SELECT = (
    "*, profiles!questions_teacher_id_fkey(full_name), "
    "answers(*, profiles!answers_teacher_id_fkey(full_name))"
)
TEACHER_QUESTIONS_SELECT = "*, profiles!questions_student_id_fkey(full_name), answers(*)"


# ============================================================
#  SUPABASE CLIENT (one per browser session)
# ============================================================
def create_supabase_client(url: Optional[str] = None, key: Optional[str] = None):
    url = (SUPABASE_URL if url is None else url or "").strip()
    key = (SUPABASE_ANON_KEY if key is None else key or "").strip()
    if not url or not key:
        return None
    try:
        from supabase import create_client
        return create_client(url, key)
    except Exception as e:
        st.session_state["db_last_error"] = f"Supabase Client Error: {type(e).__name__}: {e}"
        LOGGER.error("Supabase client init failed", extra={"ctx": {"component": "supabase", "error": type(e).__name__}})
        return None


def get_supabase_client():
    """
    The client carries the signed-in user's session, so it lives in
    st.session_state rather than st.cache_resource (which is shared by all
    sessions of the server).
    """
    sb = st.session_state.get("sb_client")
    if sb is None:
        sb = create_supabase_client()
        if sb is not None:
            st.session_state["sb_client"] = sb
    return sb


def _client(sb):
    return sb if sb is not None else get_supabase_client()


def _record_error(label: str, e: Exception, **ctx) -> None:
    st.session_state["db_last_error"] = f"{label} Error: {type(e).__name__}: {e}"
    LOGGER.error(f"{label} failed", extra={"ctx": {"component": "db", "error": type(e).__name__, **ctx}})


# ============================================================
#  READS
#   Return None on failure so callers can keep their last good data.
# ============================================================
def fetch_profile(user_id: str, sb=None) -> Optional[Dict[str, Any]]:
    sb = _client(sb)
    if sb is None or not user_id:
        return None
    try:
        res = sb.table(PROFILES_TABLE).select("*").eq("user_id", user_id).limit(1).execute()
    except Exception as e:
        _record_error("Load Profile", e, user_id=user_id)
        return None
    rows = res.data or []
    return rows[0] if rows else None


def list_teachers(sb=None) -> Optional[List[Dict[str, Any]]]:
    sb = _client(sb)
    if sb is None:
        return None
    try:
        res = sb.table(PROFILES_TABLE).select("*").eq("role", ROLE_TEACHER).execute()
    except Exception as e:
        _record_error("Load Teachers", e)
        return None
    return list(res.data or [])


def list_student_questions(student_id: str, sb=None) -> Optional[List[Dict[str, Any]]]:
    sb = _client(sb)
    if sb is None or not student_id:
        return None
    try:
        res = (
            sb.table(QUESTIONS_TABLE)
            .select(STUDENT_QUESTIONS_SELECT)
            .eq("student_id", student_id)
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        _record_error("Load Student Questions", e, student_id=student_id)
        return None
    return list(res.data or [])


def list_teacher_questions(teacher_id: str, sb=None) -> Optional[List[Dict[str, Any]]]:
    sb = _client(sb)
    if sb is None or not teacher_id:
        return None
    try:
        res = (
            sb.table(QUESTIONS_TABLE)
            .select(TEACHER_QUESTIONS_SELECT)
            .eq("teacher_id", teacher_id)
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        _record_error("Load Teacher Questions", e, teacher_id=teacher_id)
        return None
    return list(res.data or [])


def question_belongs_to_student(question_id: str, student_id: str, sb=None) -> bool:
    sb = _client(sb)
    if sb is None or not question_id or not student_id:
        return False
    try:
        res = (
            sb.table(QUESTIONS_TABLE)
            .select("student_id")
            .eq("id", question_id)
            .eq("student_id", student_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        _record_error("Check Question Owner", e, question_id=question_id)
        return False
    return bool(res.data)


def fetch_rows(table: str, filters: Optional[Dict[str, Any]] = None, columns: str = "*", sb=None) -> List[Dict[str, Any]]:
    """Plain equality-filtered read used by the change feed. Raises on failure."""
    sb = _client(sb)
    if sb is None:
        raise RuntimeError("Supabase client not configured.")
    query = sb.table(table).select(columns)
    for col, value in (filters or {}).items():
        query = query.eq(col, value)
    res = query.execute()
    return list(res.data or [])


# ============================================================
#  WRITES
#   Return True only when the backend echoed the written row back; an
#   empty echo means a row-level policy filtered the write out.
# ============================================================
def insert_question(student_id: str, teacher_id: str, content: str, sb=None) -> bool:
    sb = _client(sb)
    if sb is None:
        return False
    try:
        res = sb.table(QUESTIONS_TABLE).insert({
            "content": content.strip(),
            "student_id": student_id,
            "teacher_id": teacher_id,
            "status": STATUS_PENDING,
        }).execute()
        if not res.data:
            raise RuntimeError("No row inserted.")
    except Exception as e:
        _record_error("Insert Question", e, student_id=student_id, teacher_id=teacher_id)
        return False
    LOGGER.info("Question submitted", extra={"ctx": {"component": "db", "student_id": student_id, "teacher_id": teacher_id}})
    return True


def insert_answer(question_id: str, teacher_id: str, content: str, sb=None) -> bool:
    sb = _client(sb)
    if sb is None:
        return False
    try:
        res = sb.table(ANSWERS_TABLE).insert({
            "question_id": question_id,
            "teacher_id": teacher_id,
            "content": content.strip(),
        }).execute()
        if not res.data:
            raise RuntimeError("No row inserted.")
    except Exception as e:
        _record_error("Insert Answer", e, question_id=question_id, teacher_id=teacher_id)
        return False
    LOGGER.info("Answer saved", extra={"ctx": {"component": "db", "question_id": question_id}})
    return True


def mark_question_answered(question_id: str, sb=None) -> bool:
    sb = _client(sb)
    if sb is None:
        return False
    try:
        res = sb.table(QUESTIONS_TABLE).update({"status": STATUS_ANSWERED}).eq("id", question_id).execute()
        if not res.data:
            raise RuntimeError("No row updated.")
    except Exception as e:
        _record_error("Update Question Status", e, question_id=question_id)
        return False
    return True
