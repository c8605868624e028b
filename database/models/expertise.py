from sqlalchemy import Column, Text, Integer, Numeric, TIMESTAMP, Uuid, func

from .base import Base, utcnow


class AuthorExpertiseProfile(Base):
    """
    Per-user answering aggregate.

    Maintained by processes outside the quality engine (profile builder,
    expertise stats job); the engine only reads it.
    """
    __tablename__ = 'author_expertise_profile'

    user_id = Column(Uuid, primary_key=True)
    total_answers = Column(Integer, nullable=False, default=0)
    accepted_answers = Column(Integer, nullable=False, default=0)
    expert_level = Column(Text, nullable=False, default='newcomer')  # newcomer|contributor|specialist|senior|expert|top_expert
    profile_strength = Column(Numeric(5, 2), nullable=False, default=0)  # 0-100

    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)
