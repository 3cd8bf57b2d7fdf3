"""
Answer Verifier Implementations.

Concrete verifiers for each QuestionType.
"""

from __future__ import annotations

import json
from collections import Counter
from typing import Any

from quizz.practice.models import Question, QuestionType
from .base import AnswerVerifier, VerifierRegistry, normalize


class SelectionParseError(ValueError):
    """A multiple select answer could not be read as a list of strings."""


def _as_string_list(value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise SelectionParseError("expected a JSON array of strings")
    return value


def parse_canonical_selection(answer: str) -> list[str]:
    """Parse a stored multiple select answer (JSON array of strings)."""
    try:
        return _as_string_list(json.loads(answer))
    except (TypeError, RecursionError, json.JSONDecodeError) as e:
        raise SelectionParseError(str(e)) from e


def parse_selection(raw_answer: str) -> list[str]:
    """
    Parse a submitted multiple select answer.

    A trimmed input starting with "[" is read as a JSON array of strings;
    anything else is a comma separated list with each segment trimmed.
    Empty input is an empty selection. Duplicates are kept.
    """
    text = (raw_answer or "").strip()
    if text.startswith("["):
        try:
            return _as_string_list(json.loads(text))
        except (RecursionError, json.JSONDecodeError) as e:
            raise SelectionParseError(str(e)) from e
    if not text:
        return []
    return [part.strip() for part in text.split(",")]


# =============================================================================
# EXACT_MATCH Verifier
# =============================================================================


@VerifierRegistry.register(
    QuestionType.OPEN_TEXT,
    QuestionType.MULTIPLE_CHOICE,
    QuestionType.TRUE_FALSE,
)
class ExactMatchVerifier(AnswerVerifier):
    """Correct iff the normalized answer equals the normalized canonical answer."""

    name = "exact_match"

    def check(self, question: Question, raw_answer: str) -> bool:
        actual = normalize(raw_answer)
        expected = normalize(question.answer)
        self.log.debug(f"Answer check for {question.question_type} question {question.id}: '{actual}' vs '{expected}'")
        return actual == expected


# =============================================================================
# SET_MATCH Verifier (multiple select)
# =============================================================================


@VerifierRegistry.register(QuestionType.MULTIPLE_SELECT)
class SetMatchVerifier(AnswerVerifier):
    """
    Correct iff the submitted selection equals the canonical set.

    Order does not matter. Duplicates in the submission are not collapsed,
    so a repeated entry produces a cardinality mismatch.
    """

    name = "set_match"

    def check(self, question: Question, raw_answer: str) -> bool:
        try:
            expected = parse_canonical_selection(question.answer)
        except SelectionParseError as e:
            self.log.error(f"Failed to parse multiple_select correct answer for question {question.id}: {e}")
            return False

        try:
            submitted = parse_selection(raw_answer)
        except SelectionParseError as e:
            self.log.warning(f"Failed to parse user JSON answer for question {question.id}: {e}")
            return False

        if len(submitted) != len(expected):
            self.log.debug(f"Answer length mismatch: expected {len(expected)}, got {len(submitted)}")
            return False

        # Multiset comparison: "a,a" never matches ["a", "b"]
        correct = Counter(normalize(item) for item in expected)
        given = Counter(normalize(item) for item in submitted)
        if given != correct:
            self.log.debug(f"Selection mismatch for question {question.id}: {sorted(given)} vs {sorted(correct)}")
            return False
        return True
