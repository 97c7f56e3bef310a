from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from config import ROLE_STUDENT, ROLE_TEACHER, STATUS_ANSWERED, STATUS_PENDING


def _joined_name(row: Dict[str, Any]) -> str:
    """Name from an embedded `profiles(full_name)` projection (object or one-item list)."""
    joined = row.get("profiles")
    if isinstance(joined, list):
        joined = joined[0] if joined else None
    if isinstance(joined, dict):
        return str(joined.get("full_name") or "").strip()
    return ""


@dataclass(frozen=True)
class Profile:
    id: str
    user_id: str
    full_name: str
    role: str
    created_at: Optional[str] = None

    @property
    def is_student(self) -> bool:
        return self.role == ROLE_STUDENT

    @property
    def is_teacher(self) -> bool:
        return self.role == ROLE_TEACHER

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Profile":
        return cls(
            id=str(row.get("id") or ""),
            user_id=str(row.get("user_id") or ""),
            full_name=str(row.get("full_name") or "").strip(),
            role=str(row.get("role") or "").strip().lower(),
            created_at=row.get("created_at"),
        )


@dataclass(frozen=True)
class Answer:
    id: str
    question_id: str
    teacher_id: str
    content: str
    created_at: Optional[str] = None
    teacher_name: str = ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Answer":
        return cls(
            id=str(row.get("id") or ""),
            question_id=str(row.get("question_id") or ""),
            teacher_id=str(row.get("teacher_id") or ""),
            content=str(row.get("content") or ""),
            created_at=row.get("created_at"),
            teacher_name=_joined_name(row),
        )


@dataclass(frozen=True)
class Question:
    """A question as one of the dashboards sees it.

    `counterpart_name` is the teacher's name for a student and the student's
    name for a teacher; it comes from the embedded profiles projection.
    """

    id: str
    content: str
    status: str
    student_id: str
    teacher_id: str
    created_at: Optional[str] = None
    counterpart_name: str = ""
    answers: List[Answer] = field(default_factory=list)

    @property
    def is_answered(self) -> bool:
        return self.status == STATUS_ANSWERED

    @property
    def is_pending(self) -> bool:
        return self.status != STATUS_ANSWERED

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Question":
        status = str(row.get("status") or STATUS_PENDING).strip().lower()
        if status not in (STATUS_PENDING, STATUS_ANSWERED):
            status = STATUS_PENDING
        answers = [Answer.from_row(a) for a in (row.get("answers") or []) if isinstance(a, dict)]
        answers.sort(key=lambda a: a.created_at or "")
        return cls(
            id=str(row.get("id") or ""),
            content=str(row.get("content") or ""),
            status=status,
            student_id=str(row.get("student_id") or ""),
            teacher_id=str(row.get("teacher_id") or ""),
            created_at=row.get("created_at"),
            counterpart_name=_joined_name(row),
            answers=answers,
        )
