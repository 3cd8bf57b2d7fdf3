"""
Choice randomizer.

Reorders the presented choices of multiple choice/select questions so
learners cannot memorize answer positions. The canonical answer and the
stored choice order are never touched.
"""
from __future__ import annotations

import random
from typing import Sequence, TypeVar

from quizz.practice.models import Question, QuestionType

T = TypeVar("T")


def shuffle(choices: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """
    Return a uniformly shuffled copy of choices (Fisher-Yates).

    Zero- and one-element inputs come back unchanged. The input is not mutated.
    """
    shuffled = list(choices)
    if len(shuffled) <= 1:
        return shuffled

    rand = rng or random
    for i in range(len(shuffled) - 1, 0, -1):
        j = rand.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def present(question: Question, rng: random.Random | None = None) -> Question:
    """Copy of question ready for a learner, with choices shuffled when it has any."""
    if question.kind not in (QuestionType.MULTIPLE_CHOICE, QuestionType.MULTIPLE_SELECT):
        return question
    return question.with_choices(shuffle(question.choices, rng))
