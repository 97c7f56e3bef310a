"""Question and answer write workflows plus the bookkeeping the dashboards need."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from db import insert_answer, insert_question, mark_question_answered
from models import Question

LOGGER = logging.getLogger("educonnect")

MSG_QUESTION_OK = "Question submitted successfully!"
MSG_QUESTION_FAILED = "Failed to submit question"
MSG_ANSWER_OK = "Answer submitted successfully!"
MSG_ANSWER_FAILED = "Failed to submit answer"
MSG_ANSWER_PARTIAL = "Answer submitted but failed to update status"


# ============================================================
# QUESTIONS (student side)
# ============================================================
def can_submit_question(content: str, teacher_id: Optional[str]) -> bool:
    return bool((content or "").strip()) and bool(teacher_id)


def submit_question(student_id: str, teacher_id: Optional[str], content: str, sb=None) -> Optional[bool]:
    """Insert a pending question. None means the input was rejected and nothing was sent."""
    if not can_submit_question(content, teacher_id):
        return None
    return insert_question(student_id, teacher_id, content, sb=sb)


# ============================================================
# ANSWERS (teacher side)
#   Two writes, no rollback: insert the answer, then flip the question to
#   answered. A failed second write leaves a saved answer on a pending question.
# ============================================================
class AnswerOutcome(Enum):
    FULL_SUCCESS = "full_success"
    PARTIAL_SUCCESS = "partial_success"
    FAILURE = "failure"


@dataclass(frozen=True)
class AnswerResult:
    outcome: AnswerOutcome
    detail: str = ""


def can_submit_answer(content: str) -> bool:
    return bool((content or "").strip())


def submit_answer(question_id: str, teacher_id: str, content: str, sb=None) -> Optional[AnswerResult]:
    if not can_submit_answer(content):
        return None
    if not insert_answer(question_id, teacher_id, content, sb=sb):
        return AnswerResult(AnswerOutcome.FAILURE, MSG_ANSWER_FAILED)
    if not mark_question_answered(question_id, sb=sb):
        LOGGER.warning("Answer saved, status not updated", extra={"ctx": {"component": "workflows", "question_id": question_id}})
        return AnswerResult(AnswerOutcome.PARTIAL_SUCCESS, MSG_ANSWER_PARTIAL)
    return AnswerResult(AnswerOutcome.FULL_SUCCESS, MSG_ANSWER_OK)


def retry_status_update(question_id: str, sb=None) -> AnswerResult:
    """Second half of `submit_answer` for a question whose answer is already saved."""
    if mark_question_answered(question_id, sb=sb):
        return AnswerResult(AnswerOutcome.FULL_SUCCESS, "Question marked as answered.")
    return AnswerResult(AnswerOutcome.PARTIAL_SUCCESS, MSG_ANSWER_PARTIAL)


# ============================================================
# IN-FLIGHT TRACKING
# ============================================================
class SubmissionState(Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    FAILED = "failed"


class SubmissionTracker:
    """Submission state per item id. Unknown ids are IDLE."""

    def __init__(self):
        self._states: Dict[str, SubmissionState] = {}

    def state(self, key: str) -> SubmissionState:
        return self._states.get(str(key), SubmissionState.IDLE)

    def is_in_flight(self, key: str) -> bool:
        return self.state(key) is SubmissionState.IN_FLIGHT

    def begin(self, key: str) -> bool:
        if self.is_in_flight(key):
            return False
        self._states[str(key)] = SubmissionState.IN_FLIGHT
        return True

    def succeed(self, key: str) -> None:
        self._states.pop(str(key), None)

    def fail(self, key: str) -> None:
        self._states[str(key)] = SubmissionState.FAILED


def run_answer_submission(
    tracker: SubmissionTracker, question_id: str, teacher_id: str, content: str, sb=None
) -> Optional[AnswerResult]:
    if not can_submit_answer(content) or not tracker.begin(question_id):
        return None
    result = None
    try:
        result = submit_answer(question_id, teacher_id, content, sb=sb)
    finally:
        if result is not None and result.outcome is AnswerOutcome.FULL_SUCCESS:
            tracker.succeed(question_id)
        else:
            tracker.fail(question_id)
    return result


# ============================================================
# BUCKETS / COUNTS
# ============================================================
@dataclass(frozen=True)
class QuestionCounts:
    pending: int
    answered: int
    total: int


def split_by_status(questions: Iterable[Question]) -> Tuple[List[Question], List[Question]]:
    pending: List[Question] = []
    answered: List[Question] = []
    for q in questions:
        (answered if q.is_answered else pending).append(q)
    return pending, answered


def count_questions(questions: Iterable[Question]) -> QuestionCounts:
    pending, answered = split_by_status(questions)
    return QuestionCounts(pending=len(pending), answered=len(answered), total=len(pending) + len(answered))


def questions_by_student_frame(questions: Iterable[Question]) -> pd.DataFrame:
    """One row per asking student: pending / answered / total, busiest first."""
    rows = [
        {
            "Student": q.counterpart_name or "Unknown student",
            "Pending": 0 if q.is_answered else 1,
            "Answered": 1 if q.is_answered else 0,
        }
        for q in questions
    ]
    if not rows:
        return pd.DataFrame(columns=["Student", "Pending", "Answered", "Total"])
    df = pd.DataFrame(rows).groupby("Student", as_index=False)[["Pending", "Answered"]].sum()
    df["Total"] = df["Pending"] + df["Answered"]
    return df.sort_values(["Total", "Student"], ascending=[False, True], kind="mergesort").reset_index(drop=True)
