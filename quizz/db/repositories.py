"""
SQLAlchemy repositories for questions and the progress ledger.

Each public call runs in its own session_scope(), so a call is one
transaction: question edits that invalidate progress and question
deletes that cascade to progress either fully commit or fully roll back.
"""
from __future__ import annotations

import time
from typing import Any

from loguru import logger
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session, sessionmaker

from quizz.db.database import session_scope
from quizz.db.models import ProgressRecord, QuestionRecord
from quizz.db.models.progress import utcnow
from quizz.practice.errors import ProgressNotFoundError, QuestionNotFoundError
from quizz.practice.ledger import ProgressRepository
from quizz.practice.models import ModerationStatus, ProgressEntry, Question, QuestionDraft, Role
from quizz.practice.questions import QuestionRepository, initial_status


def _elapsed_ms(start: float) -> str:
    return f"{(time.perf_counter() - start) * 1000:.1f}ms"


class SqlQuestionRepository(QuestionRepository):
    """Question storage backed by the `questions` table."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None, log: Any = None):
        self.session_factory = session_factory
        self.log = log or logger.bind(component="questions")

    def _load(self, session: Session, question_id: int) -> QuestionRecord:
        record = session.get(QuestionRecord, question_id)
        if record is None:
            self.log.debug(f"Question ID {question_id} not found")
            raise QuestionNotFoundError(question_id)
        return record

    def get_by_id(self, question_id: int) -> Question:
        with session_scope(self.session_factory) as session:
            return self._load(session, question_id).to_domain()

    def get_approved(self) -> list[Question]:
        with session_scope(self.session_factory) as session:
            records = session.scalars(
                select(QuestionRecord)
                .where(QuestionRecord.status == ModerationStatus.APPROVED.value)
                .order_by(QuestionRecord.id)
            ).all()
            return [record.to_domain() for record in records]

    def get_all(self) -> list[Question]:
        with session_scope(self.session_factory) as session:
            records = session.scalars(select(QuestionRecord).order_by(QuestionRecord.id)).all()
            return [record.to_domain() for record in records]

    def count(self, approved_only: bool = False) -> int:
        stmt = select(func.count()).select_from(QuestionRecord)
        if approved_only:
            stmt = stmt.where(QuestionRecord.status == ModerationStatus.APPROVED.value)
        with session_scope(self.session_factory) as session:
            return session.scalar(stmt) or 0

    def _new_record(self, draft: QuestionDraft, created_by: int, status: ModerationStatus) -> QuestionRecord:
        return QuestionRecord(
            category=draft.category,
            question=draft.question,
            question_type=draft.question_type.value,
            choices=list(draft.choices) or None,
            answer=draft.answer,
            keywords=list(draft.keywords),
            difficulty=draft.difficulty,
            created_by=created_by,
            status=status.value,
        )

    def create(self, draft: QuestionDraft, created_by: int, role: Role | str = Role.USER) -> Question:
        status = initial_status(draft, role)
        with session_scope(self.session_factory) as session:
            record = self._new_record(draft, created_by, status)
            session.add(record)
            session.flush()
            self.log.info(f"Question created with ID {record.id}, status '{status.value}' by user {created_by}")
            return record.to_domain()

    def bulk_create(self, drafts: list[QuestionDraft], created_by: int, role: Role | str = Role.ADMIN) -> list[Question]:
        with session_scope(self.session_factory) as session:
            records = [self._new_record(draft, created_by, initial_status(draft, role)) for draft in drafts]
            session.add_all(records)
            session.flush()
            return [record.to_domain() for record in records]

    def update(self, question_id: int, draft: QuestionDraft, user_id: int, role: Role | str = Role.USER) -> Question:
        start = time.perf_counter()
        role = Role(role)
        with session_scope(self.session_factory) as session:
            record = self._load(session, question_id)

            status = record.status
            if draft.status is not None and role in (Role.ADMIN, Role.MODERATOR):
                status = draft.status.value
            if status == ModerationStatus.APPROVED.value and record.status != ModerationStatus.APPROVED.value:
                record.approved_by = user_id
                record.approved_at = utcnow()

            answer_changed = record.answer != draft.answer

            record.category = draft.category
            record.question = draft.question
            record.question_type = draft.question_type.value
            record.choices = list(draft.choices) or None
            record.answer = draft.answer
            record.keywords = list(draft.keywords)
            record.difficulty = draft.difficulty
            record.status = status
            record.updated_at = utcnow()

            if answer_changed:
                self.log.info(f"Answer changed for question {question_id}, clearing progress")
                result = session.execute(delete(ProgressRecord).where(ProgressRecord.question_id == question_id))
                self.log.info(f"Cleared {result.rowcount} progress entries for question {question_id}")

            session.flush()
            self.log.debug(f"Update of question {question_id} completed in {_elapsed_ms(start)}")
            return record.to_domain()

    def delete(self, question_id: int) -> int:
        with session_scope(self.session_factory) as session:
            record = self._load(session, question_id)
            result = session.execute(delete(ProgressRecord).where(ProgressRecord.question_id == question_id))
            removed = result.rowcount or 0
            if removed:
                self.log.info(f"Deleted {removed} progress entries for question {question_id}")
            session.delete(record)
            self.log.info(f"Deleted question {question_id}")
            return removed

    def existing_texts(self) -> set[str]:
        with session_scope(self.session_factory) as session:
            texts = session.scalars(select(QuestionRecord.question)).all()
            return {text.strip().lower() for text in texts}


class SqlProgressRepository(ProgressRepository):
    """Progress ledger backed by the `progress` table."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None, log: Any = None):
        self.session_factory = session_factory
        self.log = log or logger.bind(component="ledger")

    def append(self, entry: ProgressEntry) -> ProgressEntry:
        with session_scope(self.session_factory) as session:
            record = ProgressRecord(
                user_id=entry.user_id,
                question_id=entry.question_id,
                user_answer=entry.user_answer,
                is_correct=entry.is_correct,
                answered_at=entry.answered_at or utcnow(),
                time_taken_seconds=entry.time_taken_seconds,
            )
            session.add(record)
            session.flush()
            self.log.info(f"Progress recorded with ID {record.id} (user {entry.user_id}, question {entry.question_id}, correct: {entry.is_correct})")
            return record.to_domain()

    def get_by_id(self, progress_id: int) -> ProgressEntry:
        with session_scope(self.session_factory) as session:
            record = session.get(ProgressRecord, progress_id)
            if record is None:
                raise ProgressNotFoundError(progress_id)
            return record.to_domain()

    def _ordered(self, stmt, limit: int | None, most_recent_first: bool):
        if most_recent_first:
            stmt = stmt.order_by(ProgressRecord.answered_at.desc(), ProgressRecord.id.desc())
        else:
            stmt = stmt.order_by(ProgressRecord.answered_at.asc(), ProgressRecord.id.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        return stmt

    def list_for_user(
        self,
        user_id: int,
        limit: int | None = None,
        most_recent_first: bool = True,
    ) -> list[ProgressEntry]:
        stmt = self._ordered(
            select(ProgressRecord).where(ProgressRecord.user_id == user_id),
            limit,
            most_recent_first,
        )
        with session_scope(self.session_factory) as session:
            return [record.to_domain() for record in session.scalars(stmt).all()]

    def list_for_user_question(
        self,
        user_id: int,
        question_id: int,
        limit: int | None = None,
        most_recent_first: bool = True,
    ) -> list[ProgressEntry]:
        stmt = self._ordered(
            select(ProgressRecord).where(
                ProgressRecord.user_id == user_id,
                ProgressRecord.question_id == question_id,
            ),
            limit,
            most_recent_first,
        )
        with session_scope(self.session_factory) as session:
            return [record.to_domain() for record in session.scalars(stmt).all()]
