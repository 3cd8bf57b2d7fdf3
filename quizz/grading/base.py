"""
Base Answer Verifier.

Provides the abstract base for per-type answer verifiers, the shared
normalization rule and a registry mapping question types to verifiers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from loguru import logger

from quizz.practice.models import Question, QuestionType


def normalize(answer: Any) -> str:
    """Trim surrounding whitespace and lowercase. The only equality rule in the system."""
    if not isinstance(answer, str):
        answer = "" if answer is None else str(answer)
    return answer.strip().lower()


# =============================================================================
# Verifier Registry
# =============================================================================


class VerifierRegistry:
    """
    Registry for answer verifiers.

    Example:
        @VerifierRegistry.register(QuestionType.OPEN_TEXT)
        class ExactMatchVerifier(AnswerVerifier):
            ...

        verifier_class = VerifierRegistry.get(QuestionType.OPEN_TEXT)
    """

    _verifiers: ClassVar[dict[QuestionType, type[AnswerVerifier]]] = {}

    @classmethod
    def register(cls, *question_types: QuestionType):
        """
        Decorator to register a verifier for one or more question types.

        Args:
            question_types: QuestionType values this verifier judges
        """

        def decorator(verifier_class: type[AnswerVerifier]):
            for question_type in question_types:
                cls._verifiers[question_type] = verifier_class
                logger.debug(f"Registered verifier: {question_type.value} -> {verifier_class.__name__}")
            return verifier_class

        return decorator

    @classmethod
    def get(cls, question_type: QuestionType) -> type[AnswerVerifier]:
        """Get verifier class by question type."""
        if question_type not in cls._verifiers:
            raise KeyError(f"No verifier registered for type: {question_type.value}")
        return cls._verifiers[question_type]

    @classmethod
    def supports(cls, question_type: QuestionType) -> bool:
        return question_type in cls._verifiers

    @classmethod
    def list_verifiers(cls) -> dict[str, type[AnswerVerifier]]:
        """List all registered verifiers."""
        return {qt.value: cls._verifiers[qt] for qt in cls._verifiers}


# =============================================================================
# Base Verifier
# =============================================================================


class AnswerVerifier(ABC):
    """
    Abstract base class for answer verifiers.

    A verifier judges a raw learner answer against a question's canonical
    answer. It never raises on malformed input: it logs the problem and
    judges the answer incorrect.
    """

    name: ClassVar[str] = "base_verifier"

    def __init__(self, log: Any = None):
        """
        Initialize verifier.

        Args:
            log: loguru-compatible logger; defaults to the module logger bound
                to this component
        """
        self.log = log or logger.bind(component="verifier")

    @abstractmethod
    def check(self, question: Question, raw_answer: str) -> bool:
        """
        Judge a learner answer.

        Args:
            question: Question carrying the canonical (unshuffled) answer
            raw_answer: Answer exactly as submitted

        Returns:
            True when the answer is correct
        """
        ...
