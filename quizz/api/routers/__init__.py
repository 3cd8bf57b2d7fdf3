"""API routers for the quizz practice service."""

from quizz.api.routers import progress_router, questions_router

__all__ = [
    "progress_router",
    "questions_router",
]
