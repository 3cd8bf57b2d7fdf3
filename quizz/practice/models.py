"""
Practice domain types.

Storage-independent dataclasses shared by the verifier, the selector,
the stats aggregator and the repositories:

- Question: one quiz question with its canonical answer
- ProgressEntry: one immutable, judged answer event
- PracticeCandidate: a question annotated with the user's history
- DerivedStats / CategoryStat: aggregated answer statistics
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any


class QuestionType(str, Enum):
    """Closed set of question variants."""

    OPEN_TEXT = "open_text"
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    MULTIPLE_SELECT = "multiple_select"

    @property
    def has_choices(self) -> bool:
        return self in (QuestionType.MULTIPLE_CHOICE, QuestionType.MULTIPLE_SELECT)


class ModerationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Role(str, Enum):
    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass
class Question:
    """
    A quiz question.

    question_type is kept as the raw stored tag; rows imported from an
    untyped store may carry a tag outside QuestionType, which the verifier
    must tolerate. For multiple_select the canonical answer is a JSON array
    of strings.
    """

    id: int
    category: str
    question: str
    question_type: str
    answer: str
    choices: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    difficulty: str = Difficulty.MEDIUM.value
    status: str = ModerationStatus.APPROVED.value
    created_by: int | None = None
    approved_by: int | None = None
    approved_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def kind(self) -> QuestionType | None:
        """Typed question variant, or None for an unknown tag."""
        try:
            return QuestionType(self.question_type)
        except ValueError:
            return None

    @property
    def is_approved(self) -> bool:
        return self.status == ModerationStatus.APPROVED.value

    def with_choices(self, choices: list[str]) -> Question:
        """Copy of this question presenting a different choice order."""
        return replace(self, choices=list(choices))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "category": self.category,
            "question": self.question,
            "question_type": self.question_type,
            "choices": list(self.choices),
            "answer": self.answer,
            "keywords": list(self.keywords),
            "difficulty": self.difficulty,
            "status": self.status,
            "created_by": self.created_by,
            "approved_by": self.approved_by,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass
class QuestionDraft:
    """Validated, storage-ready question content for create/update."""

    category: str
    question: str
    question_type: QuestionType
    answer: str
    choices: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    difficulty: str = Difficulty.MEDIUM.value
    status: ModerationStatus | None = None


@dataclass(frozen=True)
class ProgressEntry:
    """One judged answer. Never updated after creation."""

    user_id: int
    question_id: int
    user_answer: str
    is_correct: bool
    answered_at: datetime | None = None
    time_taken_seconds: int | None = None
    id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "question_id": self.question_id,
            "user_answer": self.user_answer,
            "is_correct": self.is_correct,
            "answered_at": self.answered_at.isoformat() if self.answered_at else None,
            "time_taken_seconds": self.time_taken_seconds,
        }


@dataclass
class PracticeCandidate:
    """A practiceable question annotated with one user's history on it."""

    question: Question
    last_outcome: bool | None = None
    last_answered_at: datetime | None = None
    recent_streak: int = 0

    @property
    def never_answered(self) -> bool:
        return self.last_answered_at is None

    @property
    def tier(self) -> str:
        """Human readable priority tier: new, missed or review."""
        if self.never_answered:
            return "new"
        return "review" if self.last_outcome else "missed"


@dataclass
class CategoryStat:
    answered: int = 0
    correct: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"answered": self.answered, "correct": self.correct}


@dataclass
class DerivedStats:
    """Answer statistics for one user, recomputed on every request."""

    total_questions: int = 0
    answered: int = 0
    correct: int = 0
    accuracy: float = 0.0
    streak: int = 0
    categories: dict[str, CategoryStat] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "total_questions": self.total_questions,
            "answered": self.answered,
            "correct": self.correct,
            "accuracy": self.accuracy,
            "streak": self.streak,
            "categories": {name: stat.to_dict() for name, stat in self.categories.items()},
        }


@dataclass
class ImportResult:
    total_questions: int = 0
    imported_questions: int = 0
    skipped_questions: int = 0
    errors: list[str] = field(default_factory=list)
    time_taken: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_questions": self.total_questions,
            "imported_questions": self.imported_questions,
            "skipped_questions": self.skipped_questions,
            "errors": list(self.errors),
            "time_taken": self.time_taken,
        }
