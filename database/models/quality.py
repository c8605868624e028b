import uuid

from sqlalchemy import Column, Text, Integer, Numeric, TIMESTAMP, ForeignKey, Index, Uuid, func
from sqlalchemy.orm import relationship

from .base import Base, JSONType, utcnow


class AnswerQualityMetrics(Base):
    """
    Materialized quality score for one answer.

    Exactly one row per answer, fully overwritten by every recompute.
    Deleted together with its answer.
    """
    __tablename__ = 'answer_quality_metrics'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    answer_id = Column(Uuid, ForeignKey('qa_answer.id', ondelete='CASCADE'), nullable=False, unique=True)

    content_score = Column(Numeric(5, 2), nullable=False)
    engagement_score = Column(Numeric(5, 2), nullable=False)
    expert_score = Column(Numeric(5, 2), nullable=False)
    trust_score = Column(Numeric(5, 2), nullable=False)
    expert_multiplier = Column(Numeric(4, 2), nullable=False, default=1)

    aqs = Column(Integer, nullable=False)
    label = Column(Text, nullable=False)  # STAR|PRO|USEFUL|NORMAL
    details = Column(JSONType, nullable=False, default=dict)

    # Provenance only; never influences the scores
    last_trigger = Column(Text, nullable=True)
    computed_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    answer = relationship("Answer", back_populates="quality_metrics")

    __table_args__ = (
        Index('idx_aqm_aqs', 'aqs'),
        Index('idx_aqm_label', 'label'),
        Index('idx_aqm_computed', 'computed_at'),
    )
