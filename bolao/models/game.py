"""Game ORM model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bolao.models.base import Base, utcnow

if TYPE_CHECKING:
    from bolao.models.pool import Pool


class Game(Base):
    """One registered combination of 6-15 dezenas.

    ``numbers`` holds zero-padded strings ("01".."60") sorted ascending.
    Rows are never updated after insert.
    """

    __tablename__ = "games"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    bolao_id: Mapped[str] = mapped_column(String(10), ForeignKey("boloes.id", ondelete="CASCADE"), index=True)
    numbers: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    pool: Mapped[Pool] = relationship(back_populates="games")
