"""Repository layer for pool subscribers."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from bolao.models.base import utcnow
from bolao.models.draw import Draw
from bolao.models.pool import Pool
from bolao.models.subscriber import Subscriber, SubscriberStatus


class SubscriberRepository:
    """Subscription rows; one per (pool, email)."""

    def get_by_email(self, session: Session, pool_id: str, email: str) -> Subscriber | None:
        stmt = select(Subscriber).where(Subscriber.bolao_id == pool_id, Subscriber.email == email)
        return session.scalar(stmt)

    def get_by_token(self, session: Session, pool_id: str, token: str) -> Subscriber | None:
        stmt = select(Subscriber).where(
            Subscriber.bolao_id == pool_id,
            Subscriber.verification_token == token,
        )
        return session.scalar(stmt)

    def list_for_pool(self, session: Session, pool_id: str) -> Sequence[Subscriber]:
        stmt = (
            select(Subscriber)
            .where(Subscriber.bolao_id == pool_id)
            .order_by(Subscriber.created_at.desc(), Subscriber.id.desc())
        )
        return list(session.scalars(stmt).all())

    def upsert_pending(self, session: Session, *, pool_id: str, email: str, token: str) -> Subscriber:
        """Create the subscriber, or reset an existing one back to pending."""

        subscriber = self.get_by_email(session, pool_id, email)
        if subscriber is None:
            subscriber = Subscriber(bolao_id=pool_id, email=email)
            session.add(subscriber)

        subscriber.status = SubscriberStatus.PENDING.value
        subscriber.verification_token = token
        subscriber.created_at = utcnow()
        subscriber.verified_at = None
        subscriber.last_notified_draw = None
        session.flush()
        return subscriber

    def mark_verified(self, session: Session, subscriber: Subscriber) -> Subscriber:
        subscriber.status = SubscriberStatus.VERIFIED.value
        subscriber.verification_token = None
        subscriber.verified_at = utcnow()
        session.flush()
        return subscriber

    def list_verified_subscribers_pending_notification(
        self, session: Session, pool_id: str, draw_number: int
    ) -> Sequence[Subscriber]:
        stmt = (
            select(Subscriber)
            .where(
                Subscriber.bolao_id == pool_id,
                Subscriber.status == SubscriberStatus.VERIFIED.value,
                or_(
                    Subscriber.last_notified_draw.is_(None),
                    Subscriber.last_notified_draw < draw_number,
                ),
            )
            .order_by(Subscriber.id.asc())
        )
        return list(session.scalars(stmt).all())

    def list_draw_numbers_pending_notification(self, session: Session) -> list[int]:
        """Stored draws that still owe a results mail to a verified subscriber."""

        stmt = (
            select(Draw.number)
            .join(Pool, Pool.draw_number == Draw.number)
            .join(Subscriber, Subscriber.bolao_id == Pool.id)
            .where(
                Subscriber.status == SubscriberStatus.VERIFIED.value,
                or_(
                    Subscriber.last_notified_draw.is_(None),
                    Subscriber.last_notified_draw < Draw.number,
                ),
            )
            .distinct()
            .order_by(Draw.number.asc())
        )
        return [int(n) for n in session.scalars(stmt).all()]

    def mark_notified(self, session: Session, subscriber_id: int, draw_number: int) -> None:
        session.execute(
            update(Subscriber)
            .where(Subscriber.id == subscriber_id)
            .values(last_notified_draw=draw_number)
        )

    def reset_notified(self, session: Session, draw_number: int) -> int:
        """Forget that subscribers were notified of ``draw_number``."""

        result = session.execute(
            update(Subscriber)
            .where(Subscriber.last_notified_draw == draw_number)
            .values(last_notified_draw=None)
        )
        return int(result.rowcount or 0)
