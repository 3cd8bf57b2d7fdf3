"""
Questions router.

Endpoints for:
- Practice batches (next questions for the caller)
- Question CRUD under role rules
- Moderation (approve / reject pending questions)
- Bulk import
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, Query, status
from loguru import logger
from pydantic import BaseModel, Field

from quizz.api.dependencies import get_caller, get_practice_service, get_question_service
from quizz.practice.models import Question
from quizz.practice.service import Caller, PracticeService, QuestionService

router = APIRouter()


# ========================================
# Request/Response Models
# ========================================


class QuestionRequest(BaseModel):
    """Request model for creating or replacing a question."""

    category: str = Field(..., description="Free-text category label")
    question: str = Field(..., description="Prompt text")
    question_type: Optional[str] = Field(
        None,
        description="Question type: open_text, multiple_choice, true_false, multiple_select (default open_text)",
    )
    choices: Optional[List[str]] = Field(None, description="Choices, required for multiple_choice/multiple_select")
    answer: Union[str, List[str]] = Field(..., description="Canonical answer; a list for multiple_select")
    keywords: Optional[List[str]] = None
    difficulty: Optional[str] = Field(None, description="easy, medium or hard (default medium)")
    status: Optional[str] = Field(None, description="pending, approved or rejected (moderators and admins only)")


class QuestionResponse(BaseModel):
    """Response model for a question."""

    id: int
    category: str
    question: str
    question_type: str
    choices: List[str]
    answer: str
    keywords: List[str]
    difficulty: str
    status: str
    created_by: Optional[int]
    approved_by: Optional[int]
    approved_at: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class ApprovalRequest(BaseModel):
    action: str = Field(..., description="approve or reject")


class ImportRequest(BaseModel):
    """Request model for bulk import."""

    questions: List[Dict[str, Any]] = Field(..., description="Raw question objects")


class ImportResponse(BaseModel):
    total_questions: int
    imported_questions: int
    skipped_questions: int
    errors: List[str]
    time_taken: str


class DeleteResponse(BaseModel):
    id: int
    deleted: bool
    progress_removed: int


def _response(question: Question) -> QuestionResponse:
    return QuestionResponse(**question.to_dict())


# ========================================
# Practice
# ========================================


@router.get("/next", response_model=List[QuestionResponse], summary="Get next practice questions")
def get_next_questions(
    count: Optional[int] = Query(None, description="Batch size, clamped to 1..50 (default 10)"),
    caller: Caller = Depends(get_caller),
    service: PracticeService = Depends(get_practice_service),
) -> List[QuestionResponse]:
    """
    Never-answered questions first, then those last answered incorrectly,
    then the stalest attempts.
    """
    questions = service.next_questions(caller.user_id, count)
    logger.info(f"Returning {len(questions)} questions for user {caller.user_id}")
    return [_response(question) for question in questions]


# ========================================
# CRUD
# ========================================


@router.get("", response_model=List[QuestionResponse], summary="List questions")
def list_questions(
    caller: Caller = Depends(get_caller),
    service: QuestionService = Depends(get_question_service),
) -> List[QuestionResponse]:
    """Everything for moderators and admins; approved plus own submissions otherwise."""
    return [_response(question) for question in service.list_questions(caller)]


@router.post("", response_model=QuestionResponse, status_code=status.HTTP_201_CREATED, summary="Create question")
def create_question(
    request: QuestionRequest,
    caller: Caller = Depends(get_caller),
    service: QuestionService = Depends(get_question_service),
) -> QuestionResponse:
    return _response(service.create_question(request.model_dump(), caller))


@router.post("/import", response_model=ImportResponse, summary="Bulk import questions")
def import_questions(
    request: ImportRequest,
    caller: Caller = Depends(get_caller),
    service: QuestionService = Depends(get_question_service),
) -> ImportResponse:
    """Invalid items and duplicates are skipped and reported; the rest are inserted together."""
    result = service.import_questions(request.questions, caller)
    return ImportResponse(**result.to_dict())


@router.get("/{question_id}", response_model=QuestionResponse, summary="Get question")
def get_question(
    question_id: int,
    caller: Caller = Depends(get_caller),
    service: QuestionService = Depends(get_question_service),
) -> QuestionResponse:
    return _response(service.get_question(question_id, caller))


@router.put("/{question_id}", response_model=QuestionResponse, summary="Update question")
def update_question(
    question_id: int,
    request: QuestionRequest,
    caller: Caller = Depends(get_caller),
    service: QuestionService = Depends(get_question_service),
) -> QuestionResponse:
    """Changing the answer clears all recorded progress for the question."""
    return _response(service.update_question(question_id, request.model_dump(), caller))


@router.delete("/{question_id}", response_model=DeleteResponse, summary="Delete question")
def delete_question(
    question_id: int,
    caller: Caller = Depends(get_caller),
    service: QuestionService = Depends(get_question_service),
) -> DeleteResponse:
    removed = service.delete_question(question_id, caller)
    return DeleteResponse(id=question_id, deleted=True, progress_removed=removed)


@router.post("/{question_id}/approval", response_model=QuestionResponse, summary="Approve or reject question")
def moderate_question(
    question_id: int,
    request: ApprovalRequest,
    caller: Caller = Depends(get_caller),
    service: QuestionService = Depends(get_question_service),
) -> QuestionResponse:
    return _response(service.moderate(question_id, request.action, caller))
