"""Email subscriber of a pool."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bolao.models.base import Base, utcnow

if TYPE_CHECKING:
    from bolao.models.pool import Pool


class SubscriberStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"


class Subscriber(Base):
    """Subscription to a pool's results.

    ``last_notified_draw`` is the concurso of the last results mail that
    was sent successfully.
    """

    __tablename__ = "bolao_subscribers"
    __table_args__ = (UniqueConstraint("bolao_id", "email", name="uq_subscriber_bolao_email"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    bolao_id: Mapped[str] = mapped_column(String(10), ForeignKey("boloes.id", ondelete="CASCADE"), index=True)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=SubscriberStatus.PENDING.value)
    verification_token: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_notified_draw: Mapped[int | None] = mapped_column(Integer, nullable=True)

    pool: Mapped[Pool] = relationship(back_populates="subscribers")
