"""
Answer verification entry point.

Dispatches a question to the verifier registered for its type. Tags that
no verifier handles (rows from an untyped store) are judged incorrect.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from quizz.practice.models import Question
from . import strategies  # noqa: F401  (registers the verifiers)
from .base import VerifierRegistry


def verify(question: Question, raw_answer: str, log: Any = None) -> bool:
    """
    Judge a raw learner answer against a question's canonical answer.

    Never raises for malformed answers or unknown question types.
    """
    log = log or logger.bind(component="verifier")
    kind = question.kind
    if kind is None or not VerifierRegistry.supports(kind):
        log.error(f"Unknown question type: {question.question_type} (question {question.id})")
        return False
    return VerifierRegistry.get(kind)(log).check(question, raw_answer)
