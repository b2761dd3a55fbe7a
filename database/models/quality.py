import uuid

from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Uuid, Numeric, func, Index
from sqlalchemy.orm import relationship

from .base import Base, JSONType


class AnswerQualityMetrics(Base):
    """
    Stores the latest quality score for an answer.

    Exactly one row per answer: recomputation overwrites via
    INSERT ... ON CONFLICT (answer_id) DO UPDATE. The row goes away with the
    answer (ON DELETE CASCADE).

    Tracks:
    - AQS and label
    - The four group subscores
    - A snapshot of the raw signals and scoring breakdown, for audit/debug
    - Who computed it, when, and with which engine version
    """
    __tablename__ = 'answer_quality_metrics'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    answer_id = Column(Uuid(as_uuid=True), ForeignKey('answer.id', ondelete='CASCADE'), nullable=False, unique=True)

    aqs = Column(Numeric(5, 2, asdecimal=False), nullable=False)
    label = Column(Text, nullable=False)  # LOW|NORMAL|HIGH

    content_score = Column(Numeric(5, 2, asdecimal=False), nullable=False)
    behavior_score = Column(Numeric(5, 2, asdecimal=False), nullable=False)
    expert_score = Column(Numeric(5, 2, asdecimal=False), nullable=False)
    trust_score = Column(Numeric(5, 2, asdecimal=False), nullable=False)

    signals = Column(JSONType, nullable=False, default=dict)

    computed_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    computed_by = Column(Text, nullable=False)  # SYSTEM|CRON|ADMIN
    engine_version = Column(Text, nullable=False)

    answer = relationship("Answer", back_populates="quality_metrics")

    __table_args__ = (
        Index('idx_aqm_computed_at', 'computed_at'),
        Index('idx_aqm_label', 'label'),
    )
