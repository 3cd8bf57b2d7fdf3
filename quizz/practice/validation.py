"""
Question content validation.

Turns loosely typed question input (HTTP payloads, import files, CLI
arguments) into a storage-ready QuestionDraft, or raises
InvalidQuestionError describing the first violated rule.
"""
from __future__ import annotations

import json
from typing import Any, Iterable

from quizz.grading import SelectionParseError, normalize, parse_selection
from quizz.practice.errors import InvalidQuestionError
from quizz.practice.models import Difficulty, ModerationStatus, QuestionDraft, QuestionType

VALID_TYPES = [qt.value for qt in QuestionType]
VALID_DIFFICULTIES = [d.value for d in Difficulty]
MIN_CHOICES = 2


def parse_question_type(raw: Any) -> QuestionType:
    """Trim and lowercase a type tag; empty means open_text."""
    tag = normalize(raw)
    if not tag:
        return QuestionType.OPEN_TEXT
    try:
        return QuestionType(tag)
    except ValueError:
        raise InvalidQuestionError(f"invalid question type '{raw}', must be one of: {VALID_TYPES}") from None


def parse_difficulty(raw: Any) -> str:
    """Trim and lowercase a difficulty; empty means medium."""
    difficulty = normalize(raw)
    if not difficulty:
        return Difficulty.MEDIUM.value
    if difficulty not in VALID_DIFFICULTIES:
        raise InvalidQuestionError(f"invalid difficulty '{raw}', must be easy/medium/hard")
    return difficulty


def parse_status(raw: Any) -> ModerationStatus | None:
    if raw is None or normalize(raw) == "":
        return None
    try:
        return ModerationStatus(normalize(raw))
    except ValueError:
        raise InvalidQuestionError(f"invalid status '{raw}'") from None


def _selection_values(answer: Any) -> list[str]:
    if isinstance(answer, (list, tuple)):
        if not all(isinstance(item, str) for item in answer):
            raise InvalidQuestionError("all answer array elements must be strings")
        return [item.strip() for item in answer]
    if isinstance(answer, str):
        try:
            return parse_selection(answer)
        except SelectionParseError as e:
            raise InvalidQuestionError(f"invalid JSON array in answer: {e}") from e
    raise InvalidQuestionError("invalid answer type, must be string or array")


def canonical_answer(answer: Any, question_type: QuestionType, choices: list[str]) -> str:
    """
    Validate an answer against its type and return the stored form.

    multiple_select answers are stored as a JSON array of strings; every
    other type stores the trimmed text.
    """
    if question_type is QuestionType.MULTIPLE_SELECT:
        values = _selection_values(answer)
        if not values or any(not value for value in values):
            raise InvalidQuestionError("empty answer array")
        allowed = {normalize(choice) for choice in choices}
        missing = [value for value in values if normalize(value) not in allowed]
        if missing:
            raise InvalidQuestionError(f"answers {missing} not found in choices")
        return json.dumps(values, ensure_ascii=False)

    if isinstance(answer, (list, tuple)):
        raise InvalidQuestionError(f"{question_type.value} questions take a single answer")
    text = "" if answer is None else str(answer).strip()
    if not text:
        raise InvalidQuestionError("empty answer")

    if question_type is QuestionType.MULTIPLE_CHOICE:
        if normalize(text) not in {normalize(choice) for choice in choices}:
            raise InvalidQuestionError(f"answer '{text}' not found in choices")
    return text


def build_draft(
    *,
    category: Any,
    question: Any,
    answer: Any,
    question_type: Any = None,
    choices: Iterable[str] | None = None,
    keywords: Iterable[str] | None = None,
    difficulty: Any = None,
    status: Any = None,
) -> QuestionDraft:
    """Validate raw question fields into a QuestionDraft."""
    question_text = "" if question is None else str(question).strip()
    if not question_text:
        raise InvalidQuestionError("empty question text")
    if answer is None or answer == "" or answer == []:
        raise InvalidQuestionError("empty answer")
    category_text = "" if category is None else str(category).strip()
    if not category_text:
        raise InvalidQuestionError("empty category")

    kind = parse_question_type(question_type)
    choice_list = [str(choice).strip() for choice in (choices or [])]
    if kind.has_choices:
        if len(choice_list) < MIN_CHOICES:
            raise InvalidQuestionError(f"{kind.value} questions must have at least {MIN_CHOICES} choices")
    else:
        choice_list = []

    return QuestionDraft(
        category=category_text,
        question=question_text,
        question_type=kind,
        answer=canonical_answer(answer, kind, choice_list),
        choices=choice_list,
        keywords=[str(keyword).strip() for keyword in (keywords or []) if str(keyword).strip()],
        difficulty=parse_difficulty(difficulty),
        status=parse_status(status),
    )
