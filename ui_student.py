from typing import List, Optional

import streamlit as st

from components.ui import (
    avatar_html,
    render_empty_state,
    render_meta_line,
    render_section_header,
    render_text_block,
    status_badge_html,
)
from config import ANSWERS_TABLE, DISPLAY_TIMEZONE, QUESTIONS_TABLE
from db import list_student_questions, list_teachers, question_belongs_to_student
from models import Profile, Question
from realtime import EVENT_INSERT, EVENT_UPDATE
from utils.formatting import format_date, format_datetime, initials
from view_state import load_view_data, mark_stale
from workflows import MSG_QUESTION_FAILED, MSG_QUESTION_OK, SubmissionState, SubmissionTracker, submit_question

QUESTIONS_KEY = "student_questions"
TEACHERS_KEY = "student_teachers"
TEXT_KEY = "student_question_text"
TEACHER_KEY = "student_teacher_choice"
TRACKER_KEY = "student_submit_tracker"
NEW_QUESTION = "new"


def _tracker() -> SubmissionTracker:
    tracker = st.session_state.get(TRACKER_KEY)
    if tracker is None:
        tracker = SubmissionTracker()
        st.session_state[TRACKER_KEY] = tracker
    return tracker


def _fetch_teachers() -> Optional[List[Profile]]:
    rows = list_teachers()
    return None if rows is None else [Profile.from_row(r) for r in rows]


def _fetch_questions(student_id: str) -> Optional[List[Question]]:
    rows = list_student_questions(student_id)
    return None if rows is None else [Question.from_row(r) for r in rows]


# ============================================================
# LIVE UPDATES
# ============================================================
def student_subscriptions(feed, student_id: str) -> list:
    """Subscriptions for the student dashboard; the caller owns disposal."""

    def _on_question_updated(_event):
        mark_stale(QUESTIONS_KEY)
        st.toast("**Question Updated**: A teacher has responded to your question!", icon="🔔")

    def _on_answer_inserted(event):
        # Answers carry no student id, so ownership is checked per event.
        if question_belongs_to_student(event.new.get("question_id"), student_id):
            mark_stale(QUESTIONS_KEY)
            st.toast("**New Answer**: A teacher has answered your question!", icon="🎉")

    mark_stale(TEACHERS_KEY, QUESTIONS_KEY)
    return [
        feed.subscribe(
            QUESTIONS_TABLE, EVENT_UPDATE, _on_question_updated,
            filters={"student_id": student_id}, columns="id,status",
        ),
        feed.subscribe(ANSWERS_TABLE, EVENT_INSERT, _on_answer_inserted, columns="id,question_id"),
    ]


# ============================================================
# CALLBACKS
# ============================================================
def _submit_question_cb(student_id: str) -> None:
    content = st.session_state.get(TEXT_KEY) or ""
    teacher_id = st.session_state.get(TEACHER_KEY)
    if not content.strip():
        st.toast("Please type your question first.", icon="⚠️")
        return
    if not teacher_id:
        st.toast("Please choose a teacher to ask.", icon="⚠️")
        return

    tracker = _tracker()
    if not tracker.begin(NEW_QUESTION):
        return
    ok = submit_question(student_id, teacher_id, content)
    if ok:
        tracker.succeed(NEW_QUESTION)
        st.session_state[TEXT_KEY] = ""
        st.session_state[TEACHER_KEY] = None
        mark_stale(QUESTIONS_KEY)
        st.toast(f"**Success**: {MSG_QUESTION_OK}", icon="✅")
    else:
        tracker.fail(NEW_QUESTION)
        st.toast(f"**Error**: {MSG_QUESTION_FAILED}", icon="🚨")


def visible_answers(q: Question) -> list:
    """Answers are shown once the question is marked answered."""
    return list(q.answers) if q.is_answered else []


# ============================================================
# PAGE
# ============================================================
def _render_ask_form(student_id: str, teachers: List[Profile]) -> None:
    tracker = _tracker()
    by_id = {t.user_id: t for t in teachers if t.user_id}
    options = list(by_id)
    if st.session_state.get(TEACHER_KEY) not in options:
        st.session_state[TEACHER_KEY] = None

    with st.container(border=True):
        st.markdown("#### 💬 Ask a Question")
        st.caption("Submit your question to a teacher and get personalized help")

        if not options:
            st.info("No teachers have joined yet. Check back soon.")

        st.selectbox(
            "Select Teacher",
            options,
            index=None,
            placeholder="Choose a teacher to ask your question",
            format_func=lambda uid: by_id[uid].full_name or "Unnamed teacher",
            key=TEACHER_KEY,
        )
        selected = by_id.get(st.session_state.get(TEACHER_KEY))
        if selected is not None:
            st.markdown(
                f"{avatar_html(initials(selected.full_name))} Selected Teacher: **{selected.full_name}**",
                unsafe_allow_html=True,
            )

        st.text_area(
            "Your Question",
            key=TEXT_KEY,
            height=120,
            placeholder="Describe your question in detail. The more specific you are, the better help you'll receive...",
        )

        busy = tracker.is_in_flight(NEW_QUESTION)
        st.button(
            "Submitting Question..." if busy else "📨 Submit Question",
            type="primary",
            use_container_width=True,
            disabled=busy,
            on_click=_submit_question_cb,
            args=(student_id,),
            key="student_submit_question",
        )
        if tracker.state(NEW_QUESTION) is SubmissionState.FAILED:
            st.caption("Your last question was not sent. It is still in the box above, so you can try again.")


def _render_question_card(q: Question) -> None:
    with st.container(border=True):
        render_meta_line(
            status_badge_html(q.status, pending_label="Pending Response"),
            "Asked to:",
            q.counterpart_name or "Unknown teacher",
        )
        render_text_block(q.content, caption=f"Asked on {format_date(q.created_at, DISPLAY_TIMEZONE)}")
        answers = visible_answers(q)
        if answers:
            st.markdown(f"**✅ Answer from {q.counterpart_name or 'your teacher'}:**")
            for a in answers:
                caption = f"Answered on {format_datetime(a.created_at, DISPLAY_TIMEZONE)}"
                if a.teacher_name:
                    caption += f" by {a.teacher_name}"
                render_text_block(a.content, caption=caption, answer=True)


def render_student_page(ctx) -> None:
    student_id = ctx.user.id

    render_section_header("Student Portal", "Ask questions and get answers from your teachers")

    teachers = load_view_data(TEACHERS_KEY, student_id, _fetch_teachers, error_text="Failed to load teachers")
    _render_ask_form(student_id, teachers)

    render_section_header("Your Questions")
    questions = load_view_data(
        QUESTIONS_KEY, student_id, lambda: _fetch_questions(student_id), error_text="Failed to load your questions"
    )
    if not questions:
        render_empty_state("No questions yet", "Ask your first question above to get started!")
        return
    for q in questions:
        _render_question_card(q)
