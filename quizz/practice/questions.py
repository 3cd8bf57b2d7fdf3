"""
Question repository port.

Implementations must enforce two cross-cutting rules atomically:

- update(): when the canonical answer text changes, every progress entry
  for the question is deleted in the same transaction as the update
- delete(): progress entries for the question are deleted together with it
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from quizz.practice.models import ModerationStatus, Question, QuestionDraft, Role


def initial_status(draft: QuestionDraft, role: Role | str) -> ModerationStatus:
    """Status of a new question: explicit status, else approved for admins, pending otherwise."""
    if draft.status is not None:
        return ModerationStatus(draft.status)
    return ModerationStatus.APPROVED if Role(role) is Role.ADMIN else ModerationStatus.PENDING


class QuestionRepository(ABC):
    """Storage collaborator for questions."""

    @abstractmethod
    def get_by_id(self, question_id: int) -> Question:
        """Raises QuestionNotFoundError when absent."""
        ...

    @abstractmethod
    def get_approved(self) -> list[Question]:
        """Approved questions in id order."""
        ...

    @abstractmethod
    def get_all(self) -> list[Question]:
        """Every question regardless of status, in id order."""
        ...

    @abstractmethod
    def count(self, approved_only: bool = False) -> int:
        ...

    @abstractmethod
    def create(self, draft: QuestionDraft, created_by: int, role: Role | str = Role.USER) -> Question:
        ...

    @abstractmethod
    def update(self, question_id: int, draft: QuestionDraft, user_id: int, role: Role | str = Role.USER) -> Question:
        """Apply an edit; clears the question's progress when the answer changes."""
        ...

    @abstractmethod
    def delete(self, question_id: int) -> int:
        """
        Delete a question and its progress.

        Returns:
            Number of progress entries removed
        """
        ...

    @abstractmethod
    def existing_texts(self) -> set[str]:
        """Normalized question texts, for duplicate detection."""
        ...

    @abstractmethod
    def bulk_create(self, drafts: list[QuestionDraft], created_by: int, role: Role | str = Role.ADMIN) -> list[Question]:
        """Insert many questions in one transaction."""
        ...
