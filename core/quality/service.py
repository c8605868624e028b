#!/usr/bin/env python3
"""
Answer Quality Service - Recompute orchestrator for the AQS engine.

The only component with side effects. For one answer it loads the current
state, runs the four extractors, the combiner and the classifier, and
replaces the answer's AnswerQualityMetrics row.

Recomputes of the same answer are serialized (at most one in flight per
answer id); different answers are independent and may run concurrently.
"""

import logging
from enum import Enum
from typing import Any, Callable, ContextManager, Dict, List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from core.config_loader import QualityConfig, DEFAULT_QUALITY_CONFIG
from core.utils import to_uuid
from core.quality.exceptions import AnswerNotFoundError, QualityPersistenceError
from core.quality.labels import QualityLabel
from core.quality.models import RawSignals, RecomputeTrigger, RecomputeResult, AQSResult
from core.quality.locks import KeyedLock
from core.quality.scoring import compute_aqs
from core.quality.signals import (
    extract_content_signals,
    extract_behavior_signals,
    extract_expert_signals,
    extract_trust_signals,
)
from database.models import utcnow
from database.repository import QARepository
from database.uow import qa_uow

logger = logging.getLogger(__name__)

PERSIST_ATTEMPTS = 3
PERSIST_RETRY_WAIT_SECONDS = 0.2

_NOTABLE_LABELS = (QualityLabel.STAR, QualityLabel.PRO)


class ComputeState(str, Enum):
    UNCOMPUTED = 'UNCOMPUTED'
    COMPUTING = 'COMPUTING'
    COMPUTED = 'COMPUTED'


def build_signals(
    answer,
    question,
    reactions,
    flags,
    followup_count: int,
    profile,
    config: QualityConfig = DEFAULT_QUALITY_CONFIG
) -> RawSignals:
    """
    Run the four extractors over already-loaded state.

    Order matters: behavior is extracted before expert because the expert
    sub-score consumes the behavior family's flag count.
    """
    content = extract_content_signals(
        answer.body,
        category=getattr(question, 'category', None),
        rules=config.content,
    )
    behavior = extract_behavior_signals(
        reactions,
        asker_id=getattr(question, 'author_id', None),
        is_accepted=answer.is_accepted,
        flags=flags,
        followup_count=followup_count,
    )
    expert = extract_expert_signals(profile)
    trust = extract_trust_signals(
        answer.created_at,
        getattr(question, 'created_at', None),
        edit_count=answer.edit_count,
    )
    return RawSignals(content=content, behavior=behavior, expert=expert, trust=trust)


def metrics_values(result: AQSResult, trigger: RecomputeTrigger) -> Dict[str, Any]:
    """Column values for a full replacement of the metrics row."""
    return {
        'content_score': result.scores.content,
        'engagement_score': result.scores.engagement,
        'expert_score': result.scores.expert,
        'trust_score': result.scores.trust,
        'expert_multiplier': result.expert_multiplier,
        'aqs': result.aqs,
        'label': result.label.value,
        'details': result.details.to_dict(),
        'last_trigger': trigger.value,
    }


class AnswerQualityService:
    """
    Orchestrates extract -> combine -> classify -> persist for one answer.

    Contract:
    - `recompute` always produces a result for an existing answer; missing
      question, profile, reactions or flags fall back to neutral signals.
    - A nonexistent answer raises AnswerNotFoundError; no metrics are written.
    - Per answer: an in-process keyed lock plus a row lock on the answer
      (SELECT ... FOR UPDATE) around the whole read-compute-write sequence.
    - Persistence failures roll back and raise QualityPersistenceError; the
      previous metrics row stays as it was.
    - The trigger is recorded as provenance only; the computation does not
      depend on it.
    """

    def __init__(
        self,
        uow_factory: Callable[[], ContextManager[QARepository]] = qa_uow,
        config: Optional[QualityConfig] = None,
        locks: Optional[KeyedLock] = None
    ):
        self.uow_factory = uow_factory
        self.config = config or DEFAULT_QUALITY_CONFIG
        self._locks = locks or KeyedLock()

    # ============= Single answer =============

    def recompute(self, answer_id: Any, trigger: RecomputeTrigger = RecomputeTrigger.MANUAL) -> RecomputeResult:
        """
        Recompute and persist the quality metrics of one answer.

        Args:
            answer_id: Answer identifier (UUID or its string form)
            trigger: Event that caused the recompute (provenance only)

        Returns:
            RecomputeResult with the new score, label and the previous values

        Raises:
            AnswerNotFoundError: the answer does not exist
            QualityPersistenceError: the upsert failed
        """
        trigger = RecomputeTrigger(trigger)
        key = to_uuid(answer_id)
        if key is None:
            raise AnswerNotFoundError(answer_id)

        with self._locks.hold(key):
            try:
                result = self._recompute_locked(key, trigger)
            except SQLAlchemyError as e:
                logger.error(f"AQS recompute failed for answer {key} (trigger={trigger.value}): {e}")
                raise QualityPersistenceError(key, e) from e

        if result.previous_label != result.label.value and result.label in _NOTABLE_LABELS:
            logger.info(f"[AQS] Answer {key} upgraded to {result.label.value} (AQS: {result.aqs})")

        return result

    @retry(
        retry=retry_if_exception_type(OperationalError),
        stop=stop_after_attempt(PERSIST_ATTEMPTS),
        wait=wait_fixed(PERSIST_RETRY_WAIT_SECONDS),
        reraise=True
    )
    def _recompute_locked(self, answer_id, trigger: RecomputeTrigger) -> RecomputeResult:
        with self.uow_factory() as repo:
            answer = repo.answers.get_answer(answer_id, for_update=True)
            if answer is None:
                raise AnswerNotFoundError(answer_id)

            question = repo.answers.get_question(answer.question_id)
            if question is None:
                logger.warning(f"Question {answer.question_id} missing for answer {answer_id}; using neutral signals")

            asker_id = question.author_id if question is not None else None
            reactions = repo.answers.get_reactions(answer.id)
            flags = repo.answers.get_flags(answer.id)
            followups = repo.answers.count_followups(answer.id, asker_id)
            profile = repo.expertise.get_profile(answer.author_id)

            previous = repo.metrics.get_metrics(answer.id)
            previous_aqs = previous.aqs if previous is not None else None
            previous_label = previous.label if previous is not None else None

            signals = build_signals(answer, question, reactions, flags, followups, profile, self.config)
            result = compute_aqs(signals, self.config)

            repo.metrics.upsert_metrics(answer.id, metrics_values(result, trigger), computed_at=utcnow())

        logger.info(
            f"Recomputed AQS for answer {answer_id}: aqs={result.aqs}, label={result.label.value}, "
            f"trigger={trigger.value}"
        )

        return RecomputeResult(
            answer_id=answer_id,
            aqs=result.aqs,
            label=result.label,
            trigger=trigger,
            previous_aqs=previous_aqs,
            previous_label=previous_label,
            changed=previous_aqs != result.aqs or previous_label != result.label.value,
        )

    def preview(self, answer_id: Any) -> AQSResult:
        """Compute the current AQS without persisting anything."""
        key = to_uuid(answer_id)
        if key is None:
            raise AnswerNotFoundError(answer_id)

        with self.uow_factory() as repo:
            answer = repo.answers.get_answer(key)
            if answer is None:
                raise AnswerNotFoundError(key)
            question = repo.answers.get_question(answer.question_id)
            asker_id = question.author_id if question is not None else None
            signals = build_signals(
                answer,
                question,
                repo.answers.get_reactions(answer.id),
                repo.answers.get_flags(answer.id),
                repo.answers.count_followups(answer.id, asker_id),
                repo.expertise.get_profile(answer.author_id),
                self.config,
            )
        return compute_aqs(signals, self.config)

    def state(self, answer_id: Any) -> ComputeState:
        """Uncomputed -> Computing -> Computed lifecycle of one answer's metrics."""
        key = to_uuid(answer_id)
        if key is None:
            raise AnswerNotFoundError(answer_id)
        if self._locks.is_locked(key):
            return ComputeState.COMPUTING

        with self.uow_factory() as repo:
            metrics = repo.metrics.get_metrics(key)
        return ComputeState.COMPUTED if metrics is not None else ComputeState.UNCOMPUTED

    # ============= Bulk =============

    def _recompute_many(self, answer_ids: List[Any], trigger: RecomputeTrigger) -> Dict[str, Any]:
        results: List[RecomputeResult] = []
        failed = 0

        for answer_id in answer_ids:
            try:
                results.append(self.recompute(answer_id, trigger))
            except AnswerNotFoundError:
                # Deleted between listing and recompute
                logger.warning(f"Answer {answer_id} disappeared before recompute")
            except QualityPersistenceError as e:
                failed += 1
                logger.error(f"Skipping answer {answer_id}: {e}")
            except Exception:
                failed += 1
                logger.exception(f"Unexpected error recomputing answer {answer_id}; continuing batch")

        return {
            'processed': len(answer_ids),
            'updated': sum(1 for r in results if r.changed),
            'failed': failed,
            'results': results,
        }

    def recompute_question_answers(self, question_id: Any) -> List[RecomputeResult]:
        """Recompute every answer of a question."""
        with self.uow_factory() as repo:
            answer_ids = repo.answers.get_answer_ids_for_question(to_uuid(question_id))
        return self._recompute_many(answer_ids, RecomputeTrigger.CRON)['results']

    def recompute_author_answers(
        self,
        author_id: Any,
        trigger: RecomputeTrigger = RecomputeTrigger.PROFILE_UPDATE
    ) -> List[RecomputeResult]:
        """Recompute every answer written by an author."""
        with self.uow_factory() as repo:
            answer_ids = repo.answers.get_answer_ids_for_author(to_uuid(author_id))
        return self._recompute_many(answer_ids, trigger)['results']

    def update_profile_strength_and_recompute(self, user_id: Any, strength: float) -> List[RecomputeResult]:
        """Store a new profile strength for a user and rescore all their answers."""
        user_uuid = to_uuid(user_id)
        with self.uow_factory() as repo:
            repo.expertise.upsert_profile(user_uuid, profile_strength=strength)
        logger.info(f"Profile strength for user {user_uuid} set to {strength}; recomputing answers")
        return self.recompute_author_answers(user_uuid, RecomputeTrigger.PROFILE_UPDATE)

    def batch_recompute_stale(self, max_age_days: int = 7, limit: int = 100) -> Dict[str, int]:
        """
        Recompute answers without metrics or with metrics older than max_age_days.

        Returns:
            {'processed': n, 'updated': n_changed, 'failed': n_failed}
        """
        cutoff = utcnow() - relativedelta(days=max_age_days)
        with self.uow_factory() as repo:
            answer_ids = repo.metrics.find_stale_answer_ids(cutoff, limit=limit)

        outcome = self._recompute_many(answer_ids, RecomputeTrigger.CRON)
        logger.info(
            f"[Cron] Recomputed {outcome['processed']} answers, "
            f"{outcome['updated']} changed, {outcome['failed']} failed"
        )
        return {key: outcome[key] for key in ('processed', 'updated', 'failed')}
