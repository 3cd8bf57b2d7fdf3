"""
Stats Aggregator.

Folds a user's progress history into DerivedStats: totals, accuracy,
the current global streak and a per-category breakdown. Pure read; safe
to call at any frequency. Nothing is cached.
"""
from __future__ import annotations

from typing import Any

from loguru import logger

from quizz.practice.ledger import ProgressRepository
from quizz.practice.models import CategoryStat, DerivedStats
from quizz.practice.questions import QuestionRepository
from quizz.practice.selector import leading_correct_run

DEFAULT_STREAK_LOOKBACK = 50


class StatsAggregator:
    """Computes answer statistics for a user."""

    def __init__(
        self,
        questions: QuestionRepository,
        progress: ProgressRepository,
        streak_lookback: int = DEFAULT_STREAK_LOOKBACK,
        total_approved_only: bool = False,
        log: Any = None,
    ):
        self.questions = questions
        self.progress = progress
        self.streak_lookback = streak_lookback
        self.total_approved_only = total_approved_only
        self.log = log or logger.bind(component="stats")

    def compute_stats(self, user_id: int) -> DerivedStats:
        """
        Aggregate the user's full history.

        The streak scans the most recent `streak_lookback` answers across all
        questions and stops at the first incorrect one. Entries whose question
        no longer exists count towards totals only.
        """
        stats = DerivedStats(total_questions=self.questions.count(approved_only=self.total_approved_only))

        entries = self.progress.list_for_user(user_id, most_recent_first=True)
        stats.answered = len(entries)
        stats.correct = sum(1 for entry in entries if entry.is_correct)
        if stats.answered > 0:
            stats.accuracy = stats.correct / stats.answered

        stats.streak = leading_correct_run(entries, self.streak_lookback)

        if entries:
            category_of = {question.id: question.category for question in self.questions.get_all()}
            for entry in entries:
                category = category_of.get(entry.question_id)
                if category is None:
                    continue
                stat = stats.categories.setdefault(category, CategoryStat())
                stat.answered += 1
                if entry.is_correct:
                    stat.correct += 1

        self.log.info(
            f"Stats calculated for user {user_id}: {stats.correct}/{stats.answered} correct "
            f"({stats.accuracy * 100:.1f}%), streak {stats.streak}, {len(stats.categories)} categories"
        )
        return stats
