"""
Question model.

Question Types:
- open_text: free text answer
- multiple_choice: one of the presented choices
- true_false: "true" or "false"
- multiple_select: several choices; answer stored as a JSON array

Moderation status: pending, approved, rejected. Only approved questions
are served for practice.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, CheckConstraint, DateTime, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from quizz.practice.models import Question
from .base import Base


class QuestionRecord(Base):
    """Stored question with its canonical answer and moderation state."""

    __tablename__ = "questions"
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_questions_status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    question_type: Mapped[str] = mapped_column(Text, nullable=False, default="open_text")
    choices: Mapped[list | None] = mapped_column(JSON)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    keywords: Mapped[list | None] = mapped_column(JSON)
    difficulty: Mapped[str] = mapped_column(Text, nullable=False, default="medium")

    # Moderation
    created_by: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="approved", index=True)
    approved_by: Mapped[int | None] = mapped_column(Integer)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<QuestionRecord(id={self.id}, type={self.question_type}, status={self.status})>"

    def to_domain(self) -> Question:
        return Question(
            id=self.id,
            category=self.category,
            question=self.question,
            question_type=self.question_type,
            answer=self.answer,
            choices=list(self.choices or []),
            keywords=list(self.keywords or []),
            difficulty=self.difficulty,
            status=self.status,
            created_by=self.created_by,
            approved_by=self.approved_by,
            approved_at=self.approved_at,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
