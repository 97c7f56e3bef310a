from typing import List, Optional

import streamlit as st

from components.ui import (
    render_empty_state,
    render_meta_line,
    render_section_header,
    render_stat_cards,
    render_text_block,
    status_badge_html,
)
from config import DISPLAY_TIMEZONE, QUESTIONS_TABLE
from db import list_teacher_questions
from models import Question
from realtime import EVENT_INSERT
from utils.formatting import format_short_date
from view_state import load_view_data, mark_stale
from workflows import (
    AnswerOutcome,
    SubmissionState,
    SubmissionTracker,
    count_questions,
    questions_by_student_frame,
    retry_status_update,
    run_answer_submission,
    split_by_status,
)

QUESTIONS_KEY = "teacher_questions"
TRACKER_KEY = "teacher_answer_tracker"


def _answer_key(question_id: str) -> str:
    return f"answer_text::{question_id}"


def _tracker() -> SubmissionTracker:
    tracker = st.session_state.get(TRACKER_KEY)
    if tracker is None:
        tracker = SubmissionTracker()
        st.session_state[TRACKER_KEY] = tracker
    return tracker


def _fetch_questions(teacher_id: str) -> Optional[List[Question]]:
    rows = list_teacher_questions(teacher_id)
    return None if rows is None else [Question.from_row(r) for r in rows]


# ============================================================
# LIVE UPDATES
# ============================================================
def teacher_subscriptions(feed, teacher_id: str) -> list:
    # Answers are only written from this page, so only new questions are followed.
    def _on_question_inserted(_event):
        mark_stale(QUESTIONS_KEY)
        st.toast("**New Question**: A student has asked you a question!", icon="🔔")

    mark_stale(QUESTIONS_KEY)
    return [
        feed.subscribe(
            QUESTIONS_TABLE, EVENT_INSERT, _on_question_inserted,
            filters={"teacher_id": teacher_id}, columns="id",
        ),
    ]


# ============================================================
# CALLBACKS
# ============================================================
def _submit_answer_cb(question_id: str, teacher_id: str) -> None:
    key = _answer_key(question_id)
    content = st.session_state.get(key) or ""
    if not content.strip():
        st.toast("Please type an answer first.", icon="⚠️")
        return

    result = run_answer_submission(_tracker(), question_id, teacher_id, content)
    if result is None:
        return
    if result.outcome is AnswerOutcome.FULL_SUCCESS:
        st.session_state[key] = ""
        mark_stale(QUESTIONS_KEY)
        st.toast(f"**Success**: {result.detail}", icon="✅")
    elif result.outcome is AnswerOutcome.PARTIAL_SUCCESS:
        # The answer exists now; refresh so it shows under the still-pending question.
        mark_stale(QUESTIONS_KEY)
        st.toast(f"**Warning**: {result.detail}", icon="⚠️")
    else:
        st.toast(f"**Error**: {result.detail}", icon="🚨")


def _retry_status_cb(question_id: str) -> None:
    tracker = _tracker()
    if not tracker.begin(question_id):
        return
    result = retry_status_update(question_id)
    if result.outcome is AnswerOutcome.FULL_SUCCESS:
        tracker.succeed(question_id)
        st.session_state[_answer_key(question_id)] = ""
        mark_stale(QUESTIONS_KEY)
        st.toast(f"**Success**: {result.detail}", icon="✅")
    else:
        tracker.fail(question_id)
        st.toast(f"**Warning**: {result.detail}", icon="⚠️")


# ============================================================
# PAGE
# ============================================================
def _render_pending_card(q: Question, teacher_id: str, tracker: SubmissionTracker) -> None:
    with st.container(border=True):
        render_meta_line(status_badge_html(q.status), "From:", q.counterpart_name or "Unknown student")
        render_text_block(q.content, caption=f"Asked on {format_short_date(q.created_at, DISPLAY_TIMEZONE)}")

        busy = tracker.is_in_flight(q.id)
        if q.answers:
            # Saved answer, status update lost on the way.
            st.warning("An answer was saved but the question is still marked pending.")
            for a in q.answers:
                render_text_block(a.content, caption=f"Answered on {format_short_date(a.created_at, DISPLAY_TIMEZONE)}", answer=True)
            st.button(
                "Mark as answered",
                key=f"retry_status::{q.id}",
                type="primary",
                disabled=busy,
                on_click=_retry_status_cb,
                args=(q.id,),
            )
            return

        st.text_area("Your Answer", key=_answer_key(q.id), height=100, placeholder="Type your answer here...")
        st.button(
            "Submitting..." if busy else "↩️ Submit Answer",
            key=f"answer_submit::{q.id}",
            type="primary",
            use_container_width=True,
            disabled=busy,
            on_click=_submit_answer_cb,
            args=(q.id, teacher_id),
        )
        if tracker.state(q.id) is SubmissionState.FAILED:
            st.caption("The last attempt for this question did not complete. You can try again.")


def _render_answered_card(q: Question) -> None:
    with st.container(border=True):
        render_meta_line(status_badge_html(q.status), "From:", q.counterpart_name or "Unknown student")
        render_text_block(q.content, caption=f"Asked on {format_short_date(q.created_at, DISPLAY_TIMEZONE)}")
        if q.answers:
            st.markdown("**Your Answer:**")
            for a in q.answers:
                render_text_block(a.content, caption=f"Answered on {format_short_date(a.created_at, DISPLAY_TIMEZONE)}", answer=True)


def render_teacher_page(ctx) -> None:
    teacher_id = ctx.user.id
    tracker = _tracker()

    render_section_header("Teacher Portal", "Help your students by answering their questions")

    questions = load_view_data(
        QUESTIONS_KEY, teacher_id, lambda: _fetch_questions(teacher_id), error_text="Failed to load your questions"
    )
    pending, answered = split_by_status(questions)
    counts = count_questions(questions)

    render_stat_cards([
        ("Pending Questions", counts.pending, "#f97316"),
        ("Answered Questions", counts.answered, "#16a34a"),
        ("Total Questions", counts.total, "#2563eb"),
    ])

    if not questions:
        render_empty_state(
            "Ready to Help Students",
            "Students can see your name when selecting teachers to ask questions. "
            "New questions will appear here automatically when students ask them.",
        )
        return

    if pending:
        render_section_header(f"🕒 Pending Questions ({len(pending)})")
        for q in pending:
            _render_pending_card(q, teacher_id, tracker)

    if answered:
        render_section_header(f"✅ Answered Questions ({len(answered)})")
        for q in answered:
            _render_answered_card(q)

    with st.expander("By student"):
        st.dataframe(questions_by_student_frame(questions), hide_index=True, width='stretch')
