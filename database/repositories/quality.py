import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, or_, desc

from database.models import Answer, AnswerQualityMetrics, utcnow
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class QualityMetricsRepository(BaseRepository):
    def get_metrics(self, answer_id: Any) -> Optional[AnswerQualityMetrics]:
        stmt = select(AnswerQualityMetrics).where(AnswerQualityMetrics.answer_id == answer_id)
        return self._one_or_none(stmt)

    def upsert_metrics(
        self,
        answer_id: Any,
        values: Dict[str, Any],
        computed_at: Optional[datetime] = None
    ) -> AnswerQualityMetrics:
        """
        Insert or fully replace the metrics row for an answer.

        Every scored column is overwritten; nothing from the previous row is
        merged. Callers hold the answer's row lock, so the select-then-write
        cannot race with another writer for the same answer.
        """
        record = self.get_metrics(answer_id)
        if record is None:
            record = AnswerQualityMetrics(answer_id=answer_id)
            self.db.add(record)

        record.content_score = values['content_score']
        record.engagement_score = values['engagement_score']
        record.expert_score = values['expert_score']
        record.trust_score = values['trust_score']
        record.expert_multiplier = values['expert_multiplier']
        record.aqs = values['aqs']
        record.label = values['label']
        record.details = values['details']
        record.last_trigger = values.get('last_trigger')
        record.computed_at = computed_at or utcnow()

        self.db.flush()
        return record

    def find_stale_answer_ids(self, cutoff: datetime, limit: int = 100) -> List[Any]:
        """Answers with no metrics yet, or metrics computed before `cutoff`."""
        stmt = (
            select(Answer.id)
            .outerjoin(AnswerQualityMetrics, AnswerQualityMetrics.answer_id == Answer.id)
            .where(
                or_(
                    AnswerQualityMetrics.id.is_(None),
                    AnswerQualityMetrics.computed_at < cutoff
                )
            )
            .order_by(Answer.created_at)
            .limit(limit)
        )
        return self._all(stmt)

    def get_answers_sorted_by_quality(self, question_id: Any, include_hidden: bool = False):
        """
        Answers of a question with their metrics (may be None), ordered by
        acceptance, then AQS, then recency. Unscored answers sort last among
        their peers.
        """
        stmt = (
            select(Answer, AnswerQualityMetrics)
            .outerjoin(AnswerQualityMetrics, AnswerQualityMetrics.answer_id == Answer.id)
            .where(Answer.question_id == question_id)
        )
        if not include_hidden:
            stmt = stmt.where(Answer.is_hidden.is_(False))

        stmt = stmt.order_by(
            desc(Answer.is_accepted),
            AnswerQualityMetrics.aqs.desc().nulls_last(),
            desc(Answer.created_at)
        )
        return self.db.execute(stmt).all()
