"""Persisted plan document ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from lifeplan.db.base import Base


class PlanDocument(Base):
    """One JSON plan per (user, date key).

    ``date_key`` is an ISO date for daily plans or a synthetic key such as
    ``long-term-2024`` / ``monthly-2024-03`` for longer horizons.
    """

    __tablename__ = "daily_plans"
    __table_args__ = (
        UniqueConstraint("user_id", "date_key", name="uq_daily_plans_user_date_key"),
        Index("ix_daily_plans_user_id", "user_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date_key = Column(String(length=32), nullable=False)
    timezone = Column(String(length=64), nullable=False)
    # Stored as text, not JSONB: a corrupt payload must surface on read.
    plan_json = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
