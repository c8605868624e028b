#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from pydantic import BaseModel, Field
from typing import Optional


class AskQuestionRequest(BaseModel):
    """Request to post a question."""
    title: str = Field(..., min_length=1, description="Question title")
    body: str = Field(default="", description="Question details")
    category: Optional[str] = Field(
        None,
        description="salary, tax, insurance, labor_law, career, interview or resume"
    )


class AnswerBodyRequest(BaseModel):
    """Request carrying an answer (or follow-up) body."""
    body: str = Field(..., description="Answer text")


class ReactionRequest(BaseModel):
    """Request to react to an answer."""
    type: str = Field(..., description="Reaction type: helpful or not_helpful")


class FlagRequest(BaseModel):
    """Request to flag an answer for moderation."""
    reason: str = Field(..., description="SPAM, ABUSE, MISLEADING, LOW_QUALITY or OTHER")
    note: Optional[str] = Field(None, max_length=1000, description="Optional free-text note")
