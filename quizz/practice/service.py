"""
Practice Service.

Caller-facing facade over the engine: judges answers, records progress,
serves practice batches and stats, and applies the role rules for
question authoring. The HTTP API and the CLI both go through here.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from config import Settings, get_settings
from quizz.grading import verify
from quizz.practice.errors import InvalidQuestionError, PermissionDeniedError, QuestionNotFoundError
from quizz.practice.importer import QuestionImporter
from quizz.practice.ledger import ProgressRepository
from quizz.practice.models import (
    DerivedStats,
    ImportResult,
    ModerationStatus,
    PracticeCandidate,
    ProgressEntry,
    Question,
    Role,
)
from quizz.practice.questions import QuestionRepository
from quizz.practice.randomizer import present
from quizz.practice.selector import NextQuestionSelector
from quizz.practice.stats import StatsAggregator
from quizz.practice.validation import build_draft


@dataclass(frozen=True)
class Caller:
    """Identity of whoever is acting on the service."""

    user_id: int
    role: Role = Role.USER

    @property
    def is_staff(self) -> bool:
        return self.role in (Role.ADMIN, Role.MODERATOR)


def can_view(question: Question, caller: Caller) -> bool:
    """Staff see everything; others see approved questions and their own submissions."""
    return caller.is_staff or question.is_approved or question.created_by == caller.user_id


def can_edit(question: Question, caller: Caller) -> bool:
    return caller.is_staff or question.created_by == caller.user_id


def can_delete(question: Question, caller: Caller) -> bool:
    return caller.role is Role.ADMIN or question.created_by == caller.user_id


@dataclass
class PracticeService:
    """Answer checking, progress recording and practice batches for learners."""

    questions: QuestionRepository
    progress: ProgressRepository
    settings: Settings = field(default_factory=get_settings)
    log: Any = None

    def __post_init__(self) -> None:
        self.log = self.log or logger.bind(component="practice")
        self.selector = NextQuestionSelector(
            self.questions,
            self.progress,
            recent_window=self.settings.recent_attempts_window,
            shuffle_choices=self.settings.shuffle_choices,
            log=self.log,
        )
        self.stats = StatsAggregator(
            self.questions,
            self.progress,
            streak_lookback=self.settings.streak_lookback,
            total_approved_only=self.settings.stats_total_approved_only,
            log=self.log,
        )

    def check_answer(self, question: Question, raw_answer: str) -> bool:
        return verify(question, raw_answer, self.log)

    def record_progress(
        self,
        user_id: int,
        question_id: int,
        raw_answer: str,
        time_taken_seconds: int | None = None,
    ) -> ProgressEntry:
        """
        Judge an answer and append it to the ledger.

        Raises:
            QuestionNotFoundError: question_id does not exist
        """
        question = self.questions.get_by_id(question_id)
        is_correct = self.check_answer(question, raw_answer)
        self.log.debug(f"User {user_id} answered question {question_id}: correct={is_correct}")
        return self.progress.append(
            ProgressEntry(
                user_id=user_id,
                question_id=question_id,
                user_answer=raw_answer,
                is_correct=is_correct,
                time_taken_seconds=time_taken_seconds,
            )
        )

    def next_questions(self, user_id: int, count: int | None = None) -> list[Question]:
        return self.selector.select_next(user_id, self.settings.clamp_count(count))

    def candidates(self, user_id: int) -> list[PracticeCandidate]:
        return self.selector.candidates(user_id)

    def user_stats(self, user_id: int) -> DerivedStats:
        return self.stats.compute_stats(user_id)


@dataclass
class QuestionService:
    """Question authoring, moderation and import under caller roles."""

    questions: QuestionRepository
    settings: Settings = field(default_factory=get_settings)
    log: Any = None

    def __post_init__(self) -> None:
        self.log = self.log or logger.bind(component="questions")

    def list_questions(self, caller: Caller) -> list[Question]:
        return [question for question in self.questions.get_all() if can_view(question, caller)]

    def get_question(self, question_id: int, caller: Caller, shuffle: bool = True) -> Question:
        """
        Fetch one question for display.

        Raises:
            QuestionNotFoundError: missing, or not visible to the caller
        """
        question = self.questions.get_by_id(question_id)
        if not can_view(question, caller):
            self.log.debug(f"Question {question_id} hidden from user {caller.user_id}")
            raise QuestionNotFoundError(question_id)
        return present(question) if shuffle and self.settings.shuffle_choices else question

    def create_question(self, payload: dict[str, Any], caller: Caller) -> Question:
        """
        Validate and store a new question.

        Only staff may pick the initial status; everybody else gets the
        role default (approved for admins, pending otherwise).
        """
        draft = build_draft(**self._fields(payload, caller))
        return self.questions.create(draft, created_by=caller.user_id, role=caller.role)

    def update_question(self, question_id: int, payload: dict[str, Any], caller: Caller) -> Question:
        """
        Replace a question's content.

        Changing the canonical answer clears every learner's progress on it.

        Raises:
            QuestionNotFoundError: question_id does not exist
            PermissionDeniedError: caller is neither staff nor the creator
            InvalidQuestionError: the new content is invalid
        """
        existing = self.questions.get_by_id(question_id)
        if not can_edit(existing, caller):
            raise PermissionDeniedError(f"user {caller.user_id} may not edit question {question_id}")
        draft = build_draft(**self._fields(payload, caller))
        return self.questions.update(question_id, draft, user_id=caller.user_id, role=caller.role)

    def delete_question(self, question_id: int, caller: Caller) -> int:
        """Delete a question and its progress; returns the number of progress entries removed."""
        existing = self.questions.get_by_id(question_id)
        if not can_delete(existing, caller):
            raise PermissionDeniedError(f"user {caller.user_id} may not delete question {question_id}")
        return self.questions.delete(question_id)

    def moderate(self, question_id: int, action: str, caller: Caller) -> Question:
        """
        Approve or reject a pending question without touching its content.

        Raises:
            PermissionDeniedError: caller is not staff
            InvalidQuestionError: unknown action, or the question is not pending
        """
        if not caller.is_staff:
            raise PermissionDeniedError("only moderators and admins can approve questions")
        statuses = {"approve": ModerationStatus.APPROVED, "reject": ModerationStatus.REJECTED}
        if action not in statuses:
            raise InvalidQuestionError("action must be 'approve' or 'reject'")
        existing = self.questions.get_by_id(question_id)
        if existing.status != ModerationStatus.PENDING.value:
            raise InvalidQuestionError("question is not pending approval")
        payload = existing.to_dict()
        payload["status"] = statuses[action].value
        draft = build_draft(**self._fields(payload, caller))
        question = self.questions.update(question_id, draft, user_id=caller.user_id, role=caller.role)
        self.log.info(f"Question {question_id} {action}d by user {caller.user_id}")
        return question

    def import_questions(self, items: list[dict[str, Any]], caller: Caller) -> ImportResult:
        if not caller.is_staff:
            raise PermissionDeniedError("only moderators and admins can import questions")
        importer = QuestionImporter(self.questions, max_questions=self.settings.import_max_questions)
        return importer.import_questions(items, created_by=caller.user_id, role=caller.role)

    def _fields(self, payload: dict[str, Any], caller: Caller) -> dict[str, Any]:
        return {
            "category": payload.get("category"),
            "question": payload.get("question"),
            "question_type": payload.get("question_type"),
            "choices": payload.get("choices"),
            "answer": payload.get("answer"),
            "keywords": payload.get("keywords"),
            "difficulty": payload.get("difficulty"),
            "status": payload.get("status") if caller.is_staff else None,
        }
