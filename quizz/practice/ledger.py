"""
Progress ledger port.

Append-only store of judged answer events. Entries are never updated;
they disappear only when their question is deleted or its canonical
answer changes (see QuestionRepository.update).
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from quizz.practice.models import ProgressEntry


class ProgressRepository(ABC):
    """Storage collaborator for ProgressEntry rows."""

    @abstractmethod
    def append(self, entry: ProgressEntry) -> ProgressEntry:
        """
        Persist a new entry.

        Returns:
            The stored entry with its assigned id and timestamp
        """
        ...

    @abstractmethod
    def get_by_id(self, progress_id: int) -> ProgressEntry:
        """Raises ProgressNotFoundError when absent."""
        ...

    @abstractmethod
    def list_for_user(
        self,
        user_id: int,
        limit: int | None = None,
        most_recent_first: bool = True,
    ) -> list[ProgressEntry]:
        """All of a user's entries across questions, ordered by answered_at."""
        ...

    @abstractmethod
    def list_for_user_question(
        self,
        user_id: int,
        question_id: int,
        limit: int | None = None,
        most_recent_first: bool = True,
    ) -> list[ProgressEntry]:
        """A user's entries for one question, ordered by answered_at."""
        ...
