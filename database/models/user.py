import uuid

from sqlalchemy import Column, Text, Boolean, Integer, TIMESTAMP, ForeignKey, Uuid, func, Index
from sqlalchemy.orm import relationship

from .base import Base


class User(Base):
    """
    User account. Read-only to the quality engine: only the verification flag,
    account age and deletion marker feed the trust signals.
    """
    __tablename__ = 'users'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(Text, nullable=False, unique=True)
    display_name = Column(Text)

    # Verification / status
    is_verified = Column(Boolean, nullable=False, default=False)
    email_verified_at = Column(TIMESTAMP(timezone=True))

    # Audit
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(TIMESTAMP(timezone=True))

    # Relationships
    expertise = relationship("UserExpertiseStats", back_populates="user", uselist=False, cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_users_email', 'email'),
    )


class UserExpertiseStats(Base):
    """
    Denormalized answering history per user, maintained by the Q&A subsystem.
    """
    __tablename__ = 'user_expertise_stats'

    user_id = Column(Uuid(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), primary_key=True)
    total_answers = Column(Integer, nullable=False, default=0)
    accepted_answers = Column(Integer, nullable=False, default=0)
    top_category = Column(Text)
    first_answer_at = Column(TIMESTAMP(timezone=True))
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="expertise")
