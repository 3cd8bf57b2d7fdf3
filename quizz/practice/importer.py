"""
Bulk question import.

Validates a batch of raw question dicts, skips invalid items and
duplicates (reporting why), and inserts the accepted questions in a
single transaction.

Accepted item shape:
    {
        "category": "Histoire",
        "question": "En quelle année ...?",
        "question_type": "multiple_choice",
        "choices": ["1789", "1815"],
        "answer": "1789",              # or ["a", "b"] for multiple_select
        "keywords": ["révolution"],
        "difficulty": "easy"
    }
"""
from __future__ import annotations

import time
from typing import Any, Iterable

from loguru import logger

from quizz.grading import normalize
from quizz.practice.errors import ImportValidationError, InvalidQuestionError
from quizz.practice.models import ImportResult, QuestionDraft, Role
from quizz.practice.questions import QuestionRepository
from quizz.practice.validation import build_draft

DEFAULT_MAX_QUESTIONS = 1000
PROGRESS_LOG_EVERY = 10


class QuestionImporter:
    """Imports question batches through a QuestionRepository."""

    def __init__(self, questions: QuestionRepository, max_questions: int = DEFAULT_MAX_QUESTIONS, log: Any = None):
        self.questions = questions
        self.max_questions = max_questions
        self.log = log or logger.bind(component="import")

    def _draft(self, item: Any) -> QuestionDraft:
        if not isinstance(item, dict):
            raise InvalidQuestionError("each question must be an object")
        return build_draft(
            category=item.get("category"),
            question=item.get("question"),
            question_type=item.get("question_type"),
            choices=item.get("choices"),
            answer=item.get("answer"),
            keywords=item.get("keywords"),
            difficulty=item.get("difficulty"),
        )

    def import_questions(
        self,
        items: Iterable[dict[str, Any]],
        created_by: int = 1,
        role: Role | str = Role.ADMIN,
    ) -> ImportResult:
        """
        Import a batch of questions.

        Raises:
            ImportValidationError: empty batch or more than max_questions items
        """
        items = list(items)
        start = time.perf_counter()
        result = ImportResult(total_questions=len(items))
        self.log.info(f"Starting import of {len(items)} questions")

        if not items:
            raise ImportValidationError("no questions provided")
        if len(items) > self.max_questions:
            raise ImportValidationError(f"too many questions (max {self.max_questions} per import)")

        known = self.questions.existing_texts()
        self.log.info(f"Found {len(known)} existing questions to check for duplicates")

        accepted: list[QuestionDraft] = []
        for number, item in enumerate(items, start=1):
            if number % PROGRESS_LOG_EVERY == 0 or number == result.total_questions:
                self.log.info(f"Progress: {number}/{result.total_questions} questions processed")

            try:
                draft = self._draft(item)
            except InvalidQuestionError as e:
                self._skip(result, f"Question {number}: {e}")
                continue

            key = normalize(draft.question)
            if key in known:
                self._skip(result, f"Question {number}: duplicate question already exists")
                continue

            known.add(key)
            accepted.append(draft)

        if accepted:
            self.questions.bulk_create(accepted, created_by=created_by, role=role)
        result.imported_questions = len(accepted)
        result.time_taken = f"{time.perf_counter() - start:.3f}s"

        self.log.info(
            f"Import completed: {result.imported_questions} imported, "
            f"{result.skipped_questions} skipped, {len(result.errors)} errors in {result.time_taken}"
        )
        return result

    def _skip(self, result: ImportResult, message: str) -> None:
        self.log.warning(f"SKIP: {message}")
        result.errors.append(message)
        result.skipped_questions += 1
