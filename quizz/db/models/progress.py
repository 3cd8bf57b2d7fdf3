"""
Progress model.

One row per judged answer. Rows are inserted and read, never updated.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from quizz.practice.models import ProgressEntry
from .base import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in answered_at."""
    return datetime.utcnow()


class ProgressRecord(Base):
    __tablename__ = "progress"
    __table_args__ = (
        Index("idx_progress_user_answered", "user_id", "answered_at"),
        Index("idx_progress_question", "question_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_answer: Mapped[str] = mapped_column(Text, nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    answered_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    time_taken_seconds: Mapped[int | None] = mapped_column(Integer)

    def __repr__(self) -> str:
        return f"<ProgressRecord(user={self.user_id}, question={self.question_id}, correct={self.is_correct})>"

    def to_domain(self) -> ProgressEntry:
        return ProgressEntry(
            id=self.id,
            user_id=self.user_id,
            question_id=self.question_id,
            user_answer=self.user_answer,
            is_correct=self.is_correct,
            answered_at=self.answered_at,
            time_taken_seconds=self.time_taken_seconds,
        )
