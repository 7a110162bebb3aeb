"""Repository layer for pool persistence."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from bolao.models.draw import Draw
from bolao.models.pool import Pool


class PoolRepository:
    """CRUD operations for Pool."""

    def get_by_id(self, session: Session, pool_id: str) -> Pool | None:
        return session.get(Pool, pool_id)

    def create(
        self,
        session: Session,
        *,
        pool_id: str,
        name: str | None,
        draw_number: int,
        edit_token: str,
    ) -> Pool:
        pool = Pool(id=pool_id, name=name, draw_number=draw_number, edit_token=edit_token)
        session.add(pool)
        session.flush()
        return pool

    def list_all(self, session: Session) -> Sequence[Pool]:
        stmt = select(Pool).order_by(Pool.created_at.desc())
        return list(session.scalars(stmt).all())

    def list_by_draw_number(self, session: Session, draw_number: int) -> Sequence[Pool]:
        stmt = select(Pool).where(Pool.draw_number == draw_number).order_by(Pool.created_at.asc())
        return list(session.scalars(stmt).all())

    def list_pools_missing_draw(self, session: Session) -> Sequence[Pool]:
        """Pools whose target concurso has no stored Draw yet."""

        stmt = (
            select(Pool)
            .outerjoin(Draw, Pool.draw_number == Draw.number)
            .where(Draw.number.is_(None))
            .order_by(Pool.draw_number.asc())
        )
        return list(session.scalars(stmt).all())

    def list_pending_draw_numbers(self, session: Session) -> list[int]:
        """Distinct target concursos still waiting for a result, ascending."""

        stmt = (
            select(Pool.draw_number)
            .outerjoin(Draw, Pool.draw_number == Draw.number)
            .where(Draw.number.is_(None))
            .distinct()
            .order_by(Pool.draw_number.asc())
        )
        return [int(n) for n in session.scalars(stmt).all()]

    def has_pending(self, session: Session) -> bool:
        stmt = (
            select(Pool.id)
            .outerjoin(Draw, Pool.draw_number == Draw.number)
            .where(Draw.number.is_(None))
            .limit(1)
        )
        return session.scalar(stmt) is not None

    def delete(self, session: Session, pool: Pool) -> None:
        session.delete(pool)
        session.flush()
