"""
Progress router.

Endpoints for:
- Recording a judged answer
- The caller's derived answer statistics
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger
from pydantic import BaseModel, Field

from quizz.api.dependencies import get_caller, get_practice_service
from quizz.practice.service import Caller, PracticeService

router = APIRouter()


# ========================================
# Request/Response Models
# ========================================


class ProgressRequest(BaseModel):
    """Request model for recording an answer."""

    question_id: Optional[int] = Field(None, description="Answered question ID")
    user_answer: Optional[str] = Field(None, description="Raw learner answer (JSON array or comma list for multiple_select)")
    time_taken: Optional[int] = Field(None, ge=0, description="Seconds spent answering")


class ProgressResponse(BaseModel):
    """Response model for a recorded answer."""

    id: int
    user_id: int
    question_id: int
    user_answer: str
    is_correct: bool
    answered_at: Optional[datetime]
    time_taken_seconds: Optional[int]


class CategoryStatResponse(BaseModel):
    answered: int
    correct: int


class StatsResponse(BaseModel):
    """Response model for the caller's statistics."""

    total_questions: int
    answered: int
    correct: int
    accuracy: float
    streak: int
    categories: Dict[str, CategoryStatResponse]


# ========================================
# Endpoints
# ========================================


@router.post(
    "",
    response_model=ProgressResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record an answer",
)
def record_progress(
    request: ProgressRequest,
    caller: Caller = Depends(get_caller),
    service: PracticeService = Depends(get_practice_service),
) -> ProgressResponse:
    """
    Judge the answer against the question's canonical answer and append it
    to the caller's history.
    """
    if not request.question_id or not request.user_answer:
        logger.info("Missing required fields in progress request")
        raise HTTPException(status_code=400, detail="Missing required fields")

    logger.info(f"Recording progress for user {caller.user_id}, question {request.question_id}")
    entry = service.record_progress(
        caller.user_id,
        request.question_id,
        request.user_answer,
        time_taken_seconds=request.time_taken,
    )
    return ProgressResponse(**entry.to_dict())


@router.get("/stats", response_model=StatsResponse, summary="Get answer statistics")
def get_stats(
    caller: Caller = Depends(get_caller),
    service: PracticeService = Depends(get_practice_service),
) -> StatsResponse:
    """Totals, accuracy, current streak and per-category breakdown for the caller."""
    return StatsResponse(**service.user_stats(caller.user_id).to_dict())
