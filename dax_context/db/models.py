from __future__ import annotations

import datetime as dt
import uuid
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class LearnedQuery(Base):
    """
    A generated query kept for reuse.

    `query_hash` is the MD5 of `query_text`; it is unique per dataset, so a
    repeated identical query reinforces the existing row instead of adding one.
    """

    __tablename__ = "ai_query_learning"
    __table_args__ = (
        UniqueConstraint("dataset_id", "query_hash", name="uq_query_learning_dataset_hash"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    dataset_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    company_group_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)

    question_text: Mapped[str] = mapped_column(String(500), nullable=False)
    intent: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    query_text: Mapped[str] = mapped_column(Text, nullable=False)
    query_hash: Mapped[str] = mapped_column(String(32), nullable=False)

    measures_used: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    columns_used: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    times_reused: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    success: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    error_message: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    # chat, whatsapp, api
    source: Mapped[str] = mapped_column(String(16), default="chat", nullable=False)

    last_used_at: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )


class TrainingExample(Base):
    """Curated question/query/response triple; read-only here except `last_used_at`."""

    __tablename__ = "ai_training_examples"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    dataset_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)

    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    query_text: Mapped[str] = mapped_column(Text, nullable=False)
    response_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    is_validated: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    validation_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_used_at: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )
