"""Pool (bolão) ORM model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bolao.models.base import Base, utcnow

if TYPE_CHECKING:
    from bolao.models.game import Game
    from bolao.models.subscriber import Subscriber


class Pool(Base):
    """A lottery pool targeting one Mega-Sena concurso.

    Whoever holds ``edit_token`` owns the pool.
    """

    __tablename__ = "boloes"

    id: Mapped[str] = mapped_column(String(10), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(80), nullable=True)
    draw_number: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    edit_token: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    games: Mapped[list[Game]] = relationship(
        back_populates="pool", cascade="all, delete-orphan", order_by="Game.id"
    )
    subscribers: Mapped[list[Subscriber]] = relationship(
        back_populates="pool", cascade="all, delete-orphan"
    )

    @property
    def display_name(self) -> str:
        name = (self.name or "").strip()
        if name:
            return f"Bolão {name}"
        return f"Bolão {self.id}"

    @property
    def has_custom_name(self) -> bool:
        return bool((self.name or "").strip())
