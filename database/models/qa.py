import uuid

from sqlalchemy import Column, Text, Boolean, Integer, TIMESTAMP, ForeignKey, UniqueConstraint, Index, Uuid, func
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class Question(Base):
    """
    A question asked in the Q&A section.

    Read-only from the quality engine's point of view: its author identifies
    "the asker" and its creation time anchors answer response latency.
    """
    __tablename__ = 'qa_question'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    author_id = Column(Uuid, nullable=False)
    title = Column(Text, nullable=False)
    body = Column(Text, nullable=False, default='')
    category = Column(Text, nullable=True)  # salary|tax|insurance|labor_law|career|interview|resume

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    answers = relationship("Answer", back_populates="question", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index('idx_qa_question_author', 'author_id'),
        Index('idx_qa_question_created', 'created_at'),
    )


class Answer(Base):
    """
    An answer to a question.

    Owned by its author (edits bump edit_count); the acceptance flag is set
    by the question's author.
    """
    __tablename__ = 'qa_answer'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    question_id = Column(Uuid, ForeignKey('qa_question.id', ondelete='CASCADE'), nullable=False)
    author_id = Column(Uuid, nullable=False)
    body = Column(Text, nullable=False)

    is_accepted = Column(Boolean, nullable=False, default=False)
    accepted_at = Column(TIMESTAMP(timezone=True), nullable=True)
    edit_count = Column(Integer, nullable=False, default=0)
    is_hidden = Column(Boolean, nullable=False, default=False)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    question = relationship("Question", back_populates="answers")
    reactions = relationship("AnswerReaction", back_populates="answer", cascade="all, delete-orphan", passive_deletes=True)
    flags = relationship("AnswerFlag", back_populates="answer", cascade="all, delete-orphan", passive_deletes=True)
    comments = relationship("AnswerComment", back_populates="answer", cascade="all, delete-orphan", passive_deletes=True)
    quality_metrics = relationship(
        "AnswerQualityMetrics",
        back_populates="answer",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    __table_args__ = (
        Index('idx_qa_answer_question', 'question_id'),
        Index('idx_qa_answer_author', 'author_id'),
        Index('idx_qa_answer_accepted', 'is_accepted'),
    )


class AnswerReaction(Base):
    """One reaction per (answer, user); re-reacting replaces the type."""
    __tablename__ = 'qa_answer_reaction'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    answer_id = Column(Uuid, ForeignKey('qa_answer.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(Uuid, nullable=False)
    type = Column(Text, nullable=False)  # helpful|not_helpful

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    answer = relationship("Answer", back_populates="reactions")

    __table_args__ = (
        UniqueConstraint('answer_id', 'user_id', name='uq_qa_reaction_answer_user'),
        Index('idx_qa_reaction_answer', 'answer_id'),
    )


class AnswerFlag(Base):
    """One moderation flag per (answer, user)."""
    __tablename__ = 'qa_answer_flag'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    answer_id = Column(Uuid, ForeignKey('qa_answer.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(Uuid, nullable=False)
    reason = Column(Text, nullable=False)  # SPAM|ABUSE|MISLEADING|LOW_QUALITY|OTHER
    note = Column(Text, nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    answer = relationship("Answer", back_populates="flags")

    __table_args__ = (
        UniqueConstraint('answer_id', 'user_id', name='uq_qa_flag_answer_user'),
        Index('idx_qa_flag_answer', 'answer_id'),
    )


class AnswerComment(Base):
    """Follow-up reply attached to an answer."""
    __tablename__ = 'qa_answer_comment'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    answer_id = Column(Uuid, ForeignKey('qa_answer.id', ondelete='CASCADE'), nullable=False)
    author_id = Column(Uuid, nullable=False)
    body = Column(Text, nullable=False)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    answer = relationship("Answer", back_populates="comments")

    __table_args__ = (
        Index('idx_qa_comment_answer', 'answer_id'),
    )
