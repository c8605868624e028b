#!/usr/bin/env python3
"""
Response models for API endpoints.

Serialized with camelCase keys; constructible with snake_case names.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional, Dict, Any


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnswerSnapshot(CamelModel):
    """Stored state of an answer."""
    id: str
    question_id: str
    author_id: str
    body: str
    is_accepted: bool
    accepted_at: Optional[str] = None
    edit_count: int = 0
    is_hidden: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class MetricsSnapshot(CamelModel):
    """Persisted AnswerQualityMetrics row."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "contentScore": 75.24,
                "engagementScore": 30.0,
                "expertScore": 50.0,
                "trustScore": 80.0,
                "expertMultiplier": 1.0,
                "aqs": 60,
                "label": "USEFUL",
                "details": {},
                "lastTrigger": "REACTION",
                "computedAt": "2026-02-01T12:00:00+00:00"
            }
        }
    )

    content_score: float = Field(ge=0, le=100)
    engagement_score: float = Field(ge=0, le=100)
    expert_score: float = Field(ge=0, le=100)
    trust_score: float = Field(ge=0, le=100)
    expert_multiplier: float
    aqs: int = Field(ge=0, le=100)
    label: str
    details: Dict[str, Any] = Field(default_factory=dict)
    last_trigger: Optional[str] = None
    computed_at: Optional[str] = None


class ReactionSnapshot(CamelModel):
    user_id: str
    type: str
    created_at: Optional[str] = None


class FlagSnapshot(CamelModel):
    user_id: str
    reason: str
    note: Optional[str] = None
    created_at: Optional[str] = None


class AnswerDebugResponse(CamelModel):
    """Everything that feeds an answer's AQS, plus the stored result."""
    success: bool = True
    answer: AnswerSnapshot
    metrics: Optional[MetricsSnapshot] = None
    state: str
    reactions: List[ReactionSnapshot] = Field(default_factory=list)
    flags: List[FlagSnapshot] = Field(default_factory=list)


class RecomputeResultResponse(CamelModel):
    answer_id: str
    aqs: int = Field(ge=0, le=100)
    label: str
    trigger: str
    previous_aqs: Optional[int] = None
    previous_label: Optional[str] = None
    changed: bool


class QualityUpdateResponse(CamelModel):
    """Result of a Q&A mutation: the recomputes it caused."""
    success: bool = True
    results: List[RecomputeResultResponse] = Field(default_factory=list)


class QuestionCreatedResponse(CamelModel):
    success: bool = True
    question_id: str


class RankedAnswer(CamelModel):
    answer: AnswerSnapshot
    aqs: Optional[int] = None
    label: Optional[str] = None


class RankedAnswersResponse(CamelModel):
    success: bool = True
    count: int
    answers: List[RankedAnswer]


class CronRecomputeResponse(CamelModel):
    success: bool = True
    processed: int
    updated: int
    failed: int = 0
    timestamp: str
