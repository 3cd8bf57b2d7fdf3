"""
Adaptive Practice Engine.

Provides:
- Domain types for questions, progress entries and statistics
- Repository ports for questions and the progress ledger
- Next-question selection, statistics aggregation and bulk import
  (see quizz.practice.selector, .stats, .importer, .service)
"""

from quizz.practice.errors import (
    ImportValidationError,
    InvalidQuestionError,
    PermissionDeniedError,
    ProgressNotFoundError,
    QuestionNotFoundError,
    QuizzError,
)
from quizz.practice.models import (
    CategoryStat,
    DerivedStats,
    Difficulty,
    ImportResult,
    ModerationStatus,
    PracticeCandidate,
    ProgressEntry,
    Question,
    QuestionDraft,
    QuestionType,
    Role,
)

__all__ = [
    "CategoryStat",
    "DerivedStats",
    "Difficulty",
    "ImportResult",
    "ModerationStatus",
    "PracticeCandidate",
    "ProgressEntry",
    "Question",
    "QuestionDraft",
    "QuestionType",
    "Role",
    "QuizzError",
    "QuestionNotFoundError",
    "ProgressNotFoundError",
    "InvalidQuestionError",
    "ImportValidationError",
    "PermissionDeniedError",
]
