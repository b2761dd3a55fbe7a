import uuid

from sqlalchemy import Column, Text, Boolean, Integer, TIMESTAMP, ForeignKey, Uuid, func, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from .base import Base


class Question(Base):
    __tablename__ = 'question'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    author_id = Column(Uuid(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    title = Column(Text, nullable=False)
    body = Column(Text)
    category = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    answers = relationship("Answer", back_populates="question", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_question_author', 'author_id'),
        Index('idx_question_category', 'category'),
    )


class Answer(Base):
    """
    A user-submitted answer. Owned by the Q&A subsystem; the quality engine
    only reads it. Deleting an answer cascades to its quality metrics.
    """
    __tablename__ = 'answer'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    question_id = Column(Uuid(as_uuid=True), ForeignKey('question.id', ondelete='CASCADE'), nullable=False)
    author_id = Column(Uuid(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)

    body = Column(Text, nullable=False)
    is_accepted = Column(Boolean, nullable=False, default=False)
    is_hidden = Column(Boolean, nullable=False, default=False)
    view_count = Column(Integer, nullable=False, default=0)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    question = relationship("Question", back_populates="answers")
    reactions = relationship("AnswerReaction", back_populates="answer", cascade="all, delete-orphan")
    flags = relationship("AnswerFlag", back_populates="answer", cascade="all, delete-orphan")
    quality_metrics = relationship(
        "AnswerQualityMetrics",
        back_populates="answer",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    __table_args__ = (
        Index('idx_answer_question', 'question_id'),
        Index('idx_answer_author', 'author_id'),
        Index('idx_answer_created', 'created_at'),
    )


class AnswerReaction(Base):
    """One reaction per user per answer: helpful | not_helpful."""
    __tablename__ = 'answer_reaction'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    answer_id = Column(Uuid(as_uuid=True), ForeignKey('answer.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    reaction_type = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    answer = relationship("Answer", back_populates="reactions")

    __table_args__ = (
        UniqueConstraint('answer_id', 'user_id', name='uq_answer_reaction_user'),
        Index('idx_answer_reaction_answer', 'answer_id'),
    )


class AnswerFlag(Base):
    """A moderation report against an answer."""
    __tablename__ = 'answer_flag'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    answer_id = Column(Uuid(as_uuid=True), ForeignKey('answer.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    reason = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    answer = relationship("Answer", back_populates="flags")

    __table_args__ = (
        Index('idx_answer_flag_answer', 'answer_id'),
    )
