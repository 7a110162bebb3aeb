"""Repository layer for game persistence."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from bolao.models.game import Game


class GameRepository:
    """Append-only storage of games."""

    def list_games(self, session: Session, pool_id: str) -> Sequence[Game]:
        """Games of a pool, most recently added first."""

        stmt = select(Game).where(Game.bolao_id == pool_id).order_by(Game.id.desc())
        return list(session.scalars(stmt).all())

    def add_many(self, session: Session, pool_id: str, games: Sequence[list[str]]) -> list[Game]:
        rows = [Game(bolao_id=pool_id, numbers=list(numbers)) for numbers in games]
        session.add_all(rows)
        session.flush()
        return rows
