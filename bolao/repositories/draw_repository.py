"""Repository layer for draw results."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from bolao.models.base import utcnow
from bolao.models.draw import Draw


class DrawRepository:
    """Read and upsert official results keyed by concurso."""

    def get_draw(self, session: Session, number: int) -> Draw | None:
        return session.get(Draw, number)

    def list_all(self, session: Session) -> Sequence[Draw]:
        stmt = select(Draw).order_by(Draw.number.desc())
        return list(session.scalars(stmt).all())

    def upsert_draw(self, session: Session, *, number: int, numbers: list[str], draw_date: str) -> Draw:
        """Insert the draw or overwrite numbers/date of the stored one.

        ``updated_at`` only moves when something actually changed, so
        replaying the same result leaves the row as it was.
        """

        draw = session.get(Draw, number)
        if draw is None:
            draw = Draw(number=number, numbers=list(numbers), draw_date=draw_date, updated_at=utcnow())
            session.add(draw)
        elif list(draw.numbers) != list(numbers) or draw.draw_date != draw_date:
            draw.numbers = list(numbers)
            draw.draw_date = draw_date
            draw.updated_at = utcnow()

        session.flush()
        return draw

    def delete(self, session: Session, draw: Draw) -> None:
        session.delete(draw)
        session.flush()
