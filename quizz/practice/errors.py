"""Domain errors raised by the practice engine and its repositories."""
from __future__ import annotations


class QuizzError(Exception):
    """Base class for practice domain errors."""


class QuestionNotFoundError(QuizzError, LookupError):
    def __init__(self, question_id: int):
        super().__init__(f"Question {question_id} not found")
        self.question_id = question_id


class ProgressNotFoundError(QuizzError, LookupError):
    def __init__(self, progress_id: int):
        super().__init__(f"Progress entry {progress_id} not found")
        self.progress_id = progress_id


class InvalidQuestionError(QuizzError, ValueError):
    """Question content violates a type or field rule."""


class ImportValidationError(QuizzError, ValueError):
    """A bulk import batch was rejected as a whole."""


class PermissionDeniedError(QuizzError):
    """Caller role may not perform the requested change."""
