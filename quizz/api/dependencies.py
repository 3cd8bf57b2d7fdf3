"""
FastAPI dependencies: caller identity and service wiring.

Tests override get_session_factory to point the services at an
in-memory database.
"""
from __future__ import annotations

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session, sessionmaker

from config import get_settings
from quizz.db.database import SessionLocal
from quizz.db.repositories import SqlProgressRepository, SqlQuestionRepository
from quizz.practice.models import Role
from quizz.practice.service import Caller, PracticeService, QuestionService


def get_session_factory() -> sessionmaker[Session]:
    return SessionLocal


def get_caller(
    x_user_id: int | None = Header(None, description="Acting user id"),
    x_user_role: str = Header("user", description="Acting user role: user, moderator or admin"),
) -> Caller:
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    try:
        role = Role(x_user_role.strip().lower())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid role '{x_user_role}'") from None
    return Caller(user_id=x_user_id, role=role)


def get_practice_service(factory: sessionmaker[Session] = Depends(get_session_factory)) -> PracticeService:
    return PracticeService(
        questions=SqlQuestionRepository(factory),
        progress=SqlProgressRepository(factory),
        settings=get_settings(),
    )


def get_question_service(factory: sessionmaker[Session] = Depends(get_session_factory)) -> QuestionService:
    return QuestionService(questions=SqlQuestionRepository(factory), settings=get_settings())
