#!/usr/bin/env python3
"""
Quality debug service - read side of the AQS engine for admins and listings.
"""

import logging
from typing import List

from core.quality import AnswerQualityService, AnswerNotFoundError, QuestionNotFoundError, RecomputeTrigger
from core.quality.models import RecomputeResult
from ..models.responses import (
    AnswerSnapshot,
    MetricsSnapshot,
    ReactionSnapshot,
    FlagSnapshot,
    AnswerDebugResponse,
    RankedAnswer,
    RecomputeResultResponse,
)
from ..utils import camelize_keys, safe_float, safe_int, safe_datetime_iso

logger = logging.getLogger(__name__)


def answer_snapshot(answer) -> AnswerSnapshot:
    return AnswerSnapshot(
        id=str(answer.id),
        question_id=str(answer.question_id),
        author_id=str(answer.author_id),
        body=answer.body,
        is_accepted=bool(answer.is_accepted),
        accepted_at=safe_datetime_iso(answer.accepted_at),
        edit_count=safe_int(answer.edit_count),
        is_hidden=bool(answer.is_hidden),
        created_at=safe_datetime_iso(answer.created_at),
        updated_at=safe_datetime_iso(answer.updated_at),
    )


def metrics_snapshot(metrics) -> MetricsSnapshot:
    return MetricsSnapshot(
        content_score=safe_float(metrics.content_score),
        engagement_score=safe_float(metrics.engagement_score),
        expert_score=safe_float(metrics.expert_score),
        trust_score=safe_float(metrics.trust_score),
        expert_multiplier=safe_float(metrics.expert_multiplier, 1.0),
        aqs=safe_int(metrics.aqs),
        label=metrics.label,
        details=camelize_keys(metrics.details or {}),
        last_trigger=metrics.last_trigger,
        computed_at=safe_datetime_iso(metrics.computed_at),
    )


def recompute_result_response(result: RecomputeResult) -> RecomputeResultResponse:
    return RecomputeResultResponse(
        answer_id=str(result.answer_id),
        aqs=result.aqs,
        label=result.label.value,
        trigger=result.trigger.value,
        previous_aqs=result.previous_aqs,
        previous_label=result.previous_label,
        changed=result.changed,
    )


class QualityDebugService:
    """Builds API views over answers and their quality metrics."""

    def __init__(self, quality_service: AnswerQualityService):
        self.quality = quality_service

    def get_debug_view(self, answer_id) -> AnswerDebugResponse:
        """
        Answer, stored metrics (or None), reactions and flags.

        Raises:
            AnswerNotFoundError: the answer does not exist.
        """
        state = self.quality.state(answer_id)

        with self.quality.uow_factory() as repo:
            answer = repo.answers.get_answer(answer_id)
            if answer is None:
                raise AnswerNotFoundError(answer_id)

            metrics = repo.metrics.get_metrics(answer.id)
            return AnswerDebugResponse(
                answer=answer_snapshot(answer),
                metrics=metrics_snapshot(metrics) if metrics is not None else None,
                state=state.value,
                reactions=[
                    ReactionSnapshot(
                        user_id=str(r.user_id),
                        type=r.type,
                        created_at=safe_datetime_iso(r.created_at),
                    )
                    for r in repo.answers.get_reactions(answer.id)
                ],
                flags=[
                    FlagSnapshot(
                        user_id=str(f.user_id),
                        reason=f.reason,
                        note=f.note,
                        created_at=safe_datetime_iso(f.created_at),
                    )
                    for f in repo.answers.get_flags(answer.id)
                ],
            )

    def force_recompute(self, answer_id) -> AnswerDebugResponse:
        """Recompute with trigger MANUAL, then return the fresh debug view."""
        result = self.quality.recompute(answer_id, RecomputeTrigger.MANUAL)
        logger.info(f"Manual recompute of answer {answer_id}: aqs={result.aqs} ({result.label.value})")
        return self.get_debug_view(answer_id)

    def get_ranked_answers(self, question_id, include_hidden: bool = False) -> List[RankedAnswer]:
        """Answers of a question ordered by acceptance, AQS, then recency."""
        with self.quality.uow_factory() as repo:
            if repo.answers.get_question(question_id) is None:
                raise QuestionNotFoundError(question_id)

            rows = repo.metrics.get_answers_sorted_by_quality(question_id, include_hidden=include_hidden)
            return [
                RankedAnswer(
                    answer=answer_snapshot(answer),
                    aqs=metrics.aqs if metrics is not None else None,
                    label=metrics.label if metrics is not None else None,
                )
                for answer, metrics in rows
            ]
