#!/usr/bin/env python3
"""
Q&A endpoints - questions, answers and the interactions that drive AQS.

The acting user comes from the `X-User-Id` header, set by the
authenticating gateway in front of this service.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query

from core.quality import QAService
from ..dependencies import get_qa_service, get_debug_service
from ..exceptions import UnauthorizedException
from ..services.quality_debug_service import QualityDebugService, recompute_result_response
from ..models.requests import AskQuestionRequest, AnswerBodyRequest, ReactionRequest, FlagRequest
from ..models.responses import (
    QualityUpdateResponse,
    QuestionCreatedResponse,
    RankedAnswersResponse,
)
from ..utils import validate_uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/qa", tags=["qa"])


def get_acting_user(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> uuid.UUID:
    if not x_user_id:
        raise UnauthorizedException("Missing X-User-Id header")
    return validate_uuid(x_user_id, "X-User-Id")


def _updated(*results) -> QualityUpdateResponse:
    return QualityUpdateResponse(
        success=True,
        results=[recompute_result_response(r) for r in results if r is not None]
    )


# ============= Questions =============

@router.post("/questions", response_model=QuestionCreatedResponse)
def ask_question(
    body: AskQuestionRequest,
    user_id: uuid.UUID = Depends(get_acting_user),
    service: QAService = Depends(get_qa_service)
):
    """Post a new question."""
    question_id = service.ask_question(user_id, body.title, body.body, body.category)
    return QuestionCreatedResponse(success=True, question_id=str(question_id))


@router.get("/questions/{question_id}/answers", response_model=RankedAnswersResponse)
def get_question_answers(
    question_id: str,
    include_hidden: bool = Query(default=False, alias="includeHidden"),
    service: QualityDebugService = Depends(get_debug_service)
):
    """
    Answers of a question, accepted first, then by AQS (highest first),
    then most recent. Answers not yet scored carry null aqs/label.
    """
    answers = service.get_ranked_answers(
        validate_uuid(question_id, "question_id"),
        include_hidden=include_hidden
    )
    return RankedAnswersResponse(success=True, count=len(answers), answers=answers)


@router.post("/questions/{question_id}/answers", response_model=QualityUpdateResponse)
def submit_answer(
    question_id: str,
    body: AnswerBodyRequest,
    user_id: uuid.UUID = Depends(get_acting_user),
    service: QAService = Depends(get_qa_service)
):
    """Submit an answer; it is scored immediately (trigger SUBMIT)."""
    result = service.submit_answer(validate_uuid(question_id, "question_id"), user_id, body.body)
    return _updated(result)


# ============= Answers =============

@router.put("/answers/{answer_id}", response_model=QualityUpdateResponse)
def edit_answer(
    answer_id: str,
    body: AnswerBodyRequest,
    user_id: uuid.UUID = Depends(get_acting_user),
    service: QAService = Depends(get_qa_service)
):
    """Edit your own answer (trigger EDIT)."""
    return _updated(service.edit_answer(validate_uuid(answer_id, "answer_id"), user_id, body.body))


@router.post("/answers/{answer_id}/reaction", response_model=QualityUpdateResponse)
def react_to_answer(
    answer_id: str,
    body: ReactionRequest,
    user_id: uuid.UUID = Depends(get_acting_user),
    service: QAService = Depends(get_qa_service)
):
    """Add or change your reaction (helpful / not_helpful)."""
    return _updated(service.record_reaction(validate_uuid(answer_id, "answer_id"), user_id, body.type))


@router.delete("/answers/{answer_id}/reaction", response_model=QualityUpdateResponse)
def remove_reaction(
    answer_id: str,
    user_id: uuid.UUID = Depends(get_acting_user),
    service: QAService = Depends(get_qa_service)
):
    """Withdraw your reaction."""
    return _updated(service.remove_reaction(validate_uuid(answer_id, "answer_id"), user_id))


@router.post("/answers/{answer_id}/accept", response_model=QualityUpdateResponse)
def toggle_accept(
    answer_id: str,
    user_id: uuid.UUID = Depends(get_acting_user),
    service: QAService = Depends(get_qa_service)
):
    """
    Accept (or un-accept) an answer. Question author only.

    The response lists every recomputed answer, including a previously
    accepted one that lost its acceptance.
    """
    return _updated(*service.toggle_accept(validate_uuid(answer_id, "answer_id"), user_id))


@router.post("/answers/{answer_id}/flag", response_model=QualityUpdateResponse)
def flag_answer(
    answer_id: str,
    body: FlagRequest,
    user_id: uuid.UUID = Depends(get_acting_user),
    service: QAService = Depends(get_qa_service)
):
    """Flag an answer for moderation."""
    return _updated(service.flag_answer(validate_uuid(answer_id, "answer_id"), user_id, body.reason, body.note))


@router.post("/answers/{answer_id}/comments", response_model=QualityUpdateResponse)
def add_comment(
    answer_id: str,
    body: AnswerBodyRequest,
    user_id: uuid.UUID = Depends(get_acting_user),
    service: QAService = Depends(get_qa_service)
):
    """Reply under an answer. Replies from the asker count as follow-ups."""
    return _updated(service.add_comment(validate_uuid(answer_id, "answer_id"), user_id, body.body))
