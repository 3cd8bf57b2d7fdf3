"""
Next-Question Selector.

Builds a practice queue for one user from the approved question pool:

1. Never-answered questions come first
2. Then questions whose most recent answer was wrong
3. Then the rest, stalest attempt first

Within a tier, older last attempts surface first; never-answered questions
keep repository order. This approximates spaced repetition with recency
and error bias, without a forgetting-curve model.

Repository errors propagate to the caller unchanged.
"""
from __future__ import annotations

import random
from collections import defaultdict
from datetime import datetime
from typing import Any

from loguru import logger

from quizz.practice.ledger import ProgressRepository
from quizz.practice.models import PracticeCandidate, ProgressEntry, Question
from quizz.practice.questions import QuestionRepository
from quizz.practice.randomizer import present

# Orders before every real timestamp
NEVER = datetime.min

DEFAULT_RECENT_WINDOW = 10


def leading_correct_run(entries: list[ProgressEntry], window: int | None = None) -> int:
    """
    Count consecutive correct entries from the most recent backwards.

    Args:
        entries: Entries ordered most recent first
        window: Only the first `window` entries are scanned (None = all)
    """
    scanned = entries if window is None else entries[:window]
    run = 0
    for entry in scanned:
        if not entry.is_correct:
            break
        run += 1
    return run


def priority_key(candidate: PracticeCandidate) -> tuple[int, int, datetime]:
    """Ascending sort key: never answered, then last wrong, then oldest attempt."""
    if candidate.never_answered:
        return (0, 0, NEVER)
    return (1, 0 if candidate.last_outcome is False else 1, candidate.last_answered_at or NEVER)


class NextQuestionSelector:
    """Selects the next practice batch for a user."""

    def __init__(
        self,
        questions: QuestionRepository,
        progress: ProgressRepository,
        recent_window: int = DEFAULT_RECENT_WINDOW,
        shuffle_choices: bool = True,
        rng: random.Random | None = None,
        log: Any = None,
    ):
        """
        Initialize selector.

        Args:
            questions: Question repository (approved pool source)
            progress: Progress ledger
            recent_window: Attempts per question scanned for recent_streak
            shuffle_choices: Shuffle presented choices of returned questions
            rng: Random source for choice shuffling
            log: loguru-compatible logger
        """
        self.questions = questions
        self.progress = progress
        self.recent_window = recent_window
        self.shuffle_choices = shuffle_choices
        self.rng = rng
        self.log = log or logger.bind(component="selector")

    def candidates(self, user_id: int) -> list[PracticeCandidate]:
        """All approved questions annotated with the user's history, in priority order."""
        pool = self.questions.get_approved()

        history: dict[int, list[ProgressEntry]] = defaultdict(list)
        for entry in self.progress.list_for_user(user_id, most_recent_first=True):
            history[entry.question_id].append(entry)

        candidates = []
        for question in pool:
            entries = history.get(question.id, [])
            if entries:
                latest = entries[0]
                candidate = PracticeCandidate(
                    question=question,
                    last_outcome=latest.is_correct,
                    last_answered_at=latest.answered_at or NEVER,
                    recent_streak=leading_correct_run(entries, self.recent_window),
                )
            else:
                candidate = PracticeCandidate(question=question)
            candidates.append(candidate)

        # sorted() is stable: ties keep repository (id) order
        return sorted(candidates, key=priority_key)

    def select_next(self, user_id: int, count: int) -> list[Question]:
        """
        Return up to `count` approved questions for the user, highest priority first.

        The caller is responsible for clamping count to a sane bound.
        """
        selected: list[Question] = []
        seen: set[int] = set()
        never_answered = 0
        missed = 0

        for candidate in self.candidates(user_id):
            if len(selected) >= count:
                break
            if candidate.question.id in seen:
                continue
            seen.add(candidate.question.id)

            if candidate.never_answered:
                never_answered += 1
            elif candidate.last_outcome is False:
                missed += 1

            question = candidate.question
            if self.shuffle_choices:
                question = present(question, self.rng)
            selected.append(question)

        self.log.info(
            f"Selected {len(selected)} questions for user {user_id} "
            f"({never_answered} never answered, {missed} incorrect)"
        )
        return selected
