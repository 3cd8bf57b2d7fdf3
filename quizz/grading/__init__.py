"""
Answer Verification.

Strategy pattern over question types: one verifier per QuestionType,
looked up through VerifierRegistry by verify().
"""

from .base import AnswerVerifier, VerifierRegistry, normalize
from .strategies import (
    ExactMatchVerifier,
    SelectionParseError,
    SetMatchVerifier,
    parse_canonical_selection,
    parse_selection,
)
from .verifier import verify

__all__ = [
    # Base classes
    "AnswerVerifier",
    "VerifierRegistry",
    "normalize",
    # Verifiers
    "ExactMatchVerifier",
    "SetMatchVerifier",
    # Parsing
    "SelectionParseError",
    "parse_selection",
    "parse_canonical_selection",
    # Entry point
    "verify",
]
