"""Official draw results."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from bolao.models.base import Base, utcnow


class DrawStatus(str, Enum):
    """Whether the draw a pool targets has been stored yet."""

    PENDING = "pending"
    RESOLVED = "resolved"


class Draw(Base):
    """One row per concurso; six zero-padded numbers, sorted."""

    __tablename__ = "draws"

    number: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    numbers: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    draw_date: Mapped[str] = mapped_column(String(20), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
