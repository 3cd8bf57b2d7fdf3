"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
Every test database is in-memory SQLite.
"""
import os
import sys
from dataclasses import replace
from datetime import datetime, timedelta
from pathlib import Path

# Must be set before config/quizz.db.database are imported
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import Settings  # noqa: E402
from quizz.db.database import init_db, make_engine, make_session_factory  # noqa: E402
from quizz.db.repositories import SqlProgressRepository, SqlQuestionRepository  # noqa: E402
from quizz.practice.errors import QuestionNotFoundError  # noqa: E402
from quizz.practice.ledger import ProgressRepository  # noqa: E402
from quizz.practice.models import ProgressEntry, Question  # noqa: E402
from quizz.practice.questions import QuestionRepository  # noqa: E402
from quizz.practice.service import PracticeService, QuestionService  # noqa: E402
from quizz.practice.validation import build_draft  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (in-memory database)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def settings():
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, database_url="sqlite://")


@pytest.fixture
def session_factory():
    """Session factory bound to a fresh in-memory database."""
    engine = make_engine("sqlite://")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def question_repo(session_factory):
    return SqlQuestionRepository(session_factory)


@pytest.fixture
def progress_repo(session_factory):
    return SqlProgressRepository(session_factory)


@pytest.fixture
def practice_service(question_repo, progress_repo, settings):
    return PracticeService(questions=question_repo, progress=progress_repo, settings=settings)


@pytest.fixture
def question_service(question_repo, settings):
    return QuestionService(questions=question_repo, settings=settings)


@pytest.fixture
def make_question(question_repo):
    """Create an approved question (admin author unless overridden)."""

    def _make(
        question="What is the capital of France?",
        answer="Paris",
        category="Geography",
        question_type="open_text",
        choices=None,
        created_by=1,
        role="admin",
        status=None,
    ):
        draft = build_draft(
            category=category,
            question=question,
            answer=answer,
            question_type=question_type,
            choices=choices,
            status=status,
        )
        return question_repo.create(draft, created_by=created_by, role=role)

    return _make


@pytest.fixture
def sample_question_items():
    """Raw import items covering every question type."""
    return [
        {
            "category": "Geography",
            "question": "What is the capital of France?",
            "answer": "Paris",
        },
        {
            "category": "History",
            "question": "In which year did the French Revolution begin?",
            "question_type": "multiple_choice",
            "choices": ["1789", "1815", "1848"],
            "answer": "1789",
            "difficulty": "easy",
        },
        {
            "category": "Science",
            "question": "Water boils at 100°C at sea level.",
            "question_type": "true_false",
            "answer": "true",
        },
        {
            "category": "Civics",
            "question": "Which words form the French motto?",
            "question_type": "multiple_select",
            "choices": ["liberté", "égalité", "fraternité", "royauté"],
            "answer": ["liberté", "égalité", "fraternité"],
            "keywords": ["devise"],
            "difficulty": "hard",
        },
    ]


# ========================================
# In-memory repositories for engine unit tests
# ========================================


class InMemoryQuestionRepository(QuestionRepository):
    """Dict-backed question store; only what the selector and stats read."""

    def __init__(self, questions=()):
        self.questions = {question.id: question for question in questions}

    def get_by_id(self, question_id):
        if question_id not in self.questions:
            raise QuestionNotFoundError(question_id)
        return self.questions[question_id]

    def get_approved(self):
        return [q for _, q in sorted(self.questions.items()) if q.is_approved]

    def get_all(self):
        return [q for _, q in sorted(self.questions.items())]

    def count(self, approved_only=False):
        return len(self.get_approved() if approved_only else self.questions)

    def create(self, draft, created_by, role="user"):
        raise NotImplementedError

    def update(self, question_id, draft, user_id, role="user"):
        raise NotImplementedError

    def delete(self, question_id):
        raise NotImplementedError

    def existing_texts(self):
        return {q.question.strip().lower() for q in self.questions.values()}

    def bulk_create(self, drafts, created_by, role="admin"):
        raise NotImplementedError


class InMemoryProgressRepository(ProgressRepository):
    """List-backed ledger ordered like the SQL adapter (answered_at, then id)."""

    def __init__(self):
        self.entries = []

    def append(self, entry):
        stored = replace(entry, id=len(self.entries) + 1, answered_at=entry.answered_at or datetime.utcnow())
        self.entries.append(stored)
        return stored

    def get_by_id(self, progress_id):
        return self.entries[progress_id - 1]

    def _ordered(self, entries, limit, most_recent_first):
        ordered = sorted(entries, key=lambda e: (e.answered_at, e.id), reverse=most_recent_first)
        return ordered if limit is None else ordered[:limit]

    def list_for_user(self, user_id, limit=None, most_recent_first=True):
        return self._ordered([e for e in self.entries if e.user_id == user_id], limit, most_recent_first)

    def list_for_user_question(self, user_id, question_id, limit=None, most_recent_first=True):
        mine = [e for e in self.entries if e.user_id == user_id and e.question_id == question_id]
        return self._ordered(mine, limit, most_recent_first)


def question_fixture(question_id, category="General", status="approved", question_type="open_text", answer="yes"):
    return Question(
        id=question_id,
        category=category,
        question=f"Question {question_id}?",
        question_type=question_type,
        answer=answer,
        choices=["yes", "no"] if question_type == "multiple_choice" else [],
        status=status,
    )


@pytest.fixture
def answered():
    """Build a ProgressEntry at a fixed offset (minutes) from a base time."""
    base = datetime(2024, 1, 1, 12, 0, 0)

    def _answered(question_id, correct, minutes, user_id=1):
        return ProgressEntry(
            user_id=user_id,
            question_id=question_id,
            user_answer="x",
            is_correct=correct,
            answered_at=base + timedelta(minutes=minutes),
        )

    return _answered


@pytest.fixture
def domain_question():
    """Factory for detached Question objects."""
    return question_fixture


@pytest.fixture
def memory_repos():
    """Build (questions, progress) in-memory repositories around the given questions."""

    def _build(*questions):
        return InMemoryQuestionRepository(questions), InMemoryProgressRepository()

    return _build
