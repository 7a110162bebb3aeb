"""Pool use-cases: creation, ownership, games and the ranked view."""

from __future__ import annotations

import hmac
import logging
import re
import secrets
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from bolao.errors import ForbiddenError, NotFoundError, ValidationError
from bolao.models.draw import Draw, DrawStatus
from bolao.models.game import Game
from bolao.models.pool import Pool
from bolao.repositories.draw_repository import DrawRepository
from bolao.repositories.game_repository import GameRepository
from bolao.repositories.pool_repository import PoolRepository
from bolao.services.hit_matcher import MatchResult, match_games
from bolao.services.lottery_client import DrawSummary, LotteryApiError, LotteryClient
from bolao.utils.numbers import normalize_game, parse_draw_number, parse_pool_name


logger = logging.getLogger(__name__)

_POOL_ID_RE = re.compile(r"^[a-f0-9]{10}$", re.IGNORECASE)


def generate_pool_id() -> str:
    return secrets.token_hex(5)


def generate_token() -> str:
    return secrets.token_hex(16)


def is_valid_pool_id(value: str) -> bool:
    return bool(_POOL_ID_RE.match(value or ""))


def parse_brazil_date(value: str | None, tz: ZoneInfo) -> datetime | None:
    """``dd/mm/yyyy`` -> last instant of that day in ``tz``."""

    match = re.match(r"^(\d{2})/(\d{2})/(\d{4})$", str(value or "").strip())
    if not match:
        return None
    day, month, year = (int(g) for g in match.groups())
    try:
        return datetime(year, month, day, 23, 59, 59, 999999, tzinfo=tz)
    except ValueError:
        return None


@dataclass(frozen=True)
class PoolView:
    pool: Pool
    status: DrawStatus
    draw: Draw | None
    match: MatchResult


class PoolService:
    """Pool use-cases."""

    def __init__(
        self,
        client: LotteryClient | None = None,
        *,
        timezone: str = "America/Sao_Paulo",
        pools: PoolRepository | None = None,
        games: GameRepository | None = None,
        draws: DrawRepository | None = None,
    ) -> None:
        self._client = client
        self._tz = ZoneInfo(timezone)
        self._pools = pools or PoolRepository()
        self._games = games or GameRepository()
        self._draws = draws or DrawRepository()

    def _fetch_summary(self) -> DrawSummary | None:
        if self._client is None:
            return None
        try:
            return self._client.fetch_summary()
        except LotteryApiError:
            logger.exception("Falha ao validar concurso")
            return None

    def _check_future_draw(self, draw_number: int, now: datetime | None = None) -> None:
        summary = self._fetch_summary()
        if summary is None:
            return

        if draw_number <= summary.latest_number:
            raise ValidationError(
                message="Este concurso já foi sorteado. Escolha um concurso futuro.",
                details={"draw_number": [f"Último concurso sorteado: {summary.latest_number}"]},
            )

        next_date = parse_brazil_date(summary.next_draw_date, self._tz)
        current = now or datetime.now(self._tz)
        if draw_number == summary.next_number and next_date is not None and current > next_date:
            raise ValidationError(message="O próximo concurso já foi sorteado. Aguarde o próximo número.")

    def create_pool(
        self,
        session: Session,
        *,
        name: object,
        draw_number: object,
        now: datetime | None = None,
    ) -> Pool:
        number = parse_draw_number(draw_number)
        clean_name = parse_pool_name(name)
        self._check_future_draw(number, now=now)

        pool = self._pools.create(
            session,
            pool_id=generate_pool_id(),
            name=clean_name,
            draw_number=number,
            edit_token=generate_token(),
        )
        logger.info("bolao_created id=%s name=%s draw_number=%s", pool.id, clean_name, number)
        return pool

    def get_pool(self, session: Session, pool_id: str) -> Pool:
        if not is_valid_pool_id(pool_id):
            raise NotFoundError(message="Bolão não encontrado.")
        pool = self._pools.get_by_id(session, pool_id.lower())
        if pool is None:
            raise NotFoundError(message="Bolão não encontrado.")
        return pool

    @staticmethod
    def is_owner(pool: Pool, token: str | None) -> bool:
        if not token:
            return False
        return hmac.compare_digest(str(token), pool.edit_token)

    def delete_pool(self, session: Session, pool_id: str) -> int:
        """Remove a pool with its games and subscribers; returns the game count."""

        pool = self.get_pool(session, pool_id)
        games = len(pool.games)
        self._pools.delete(session, pool)
        logger.info("bolao_deleted id=%s draw_number=%s games=%s", pool.id, pool.draw_number, games)
        return games

    def authorize(self, pool: Pool, token: str | None) -> None:
        if not self.is_owner(pool, token):
            raise ForbiddenError(message="Apenas o criador do bolão pode fazer isso.")

    def update_pool(
        self,
        session: Session,
        pool: Pool,
        token: str | None,
        *,
        name: object = None,
        draw_number: object = None,
        update_name: bool = False,
    ) -> Pool:
        """Rename and/or retarget a pool (owner only)."""

        self.authorize(pool, token)
        if update_name:
            pool.name = parse_pool_name(name)
        if draw_number is not None:
            pool.draw_number = parse_draw_number(draw_number)
        session.flush()
        logger.info("bolao_updated id=%s name=%s draw_number=%s", pool.id, pool.name, pool.draw_number)
        return pool

    def add_games(
        self,
        session: Session,
        pool: Pool,
        token: str | None,
        games: Sequence[Sequence[int | str]],
    ) -> list[Game]:
        """Insert all games in one go; any invalid game rejects the batch."""

        self.authorize(pool, token)
        if not games:
            raise ValidationError(message="Informe ao menos um jogo.")

        normalized: list[list[str]] = []
        for index, game in enumerate(games, start=1):
            try:
                normalized.append(normalize_game(game))
            except ValidationError as exc:
                raise ValidationError(message=f"Jogo {index}: {exc.message}", details={"game": index}) from exc

        rows = self._games.add_many(session, pool.id, normalized)
        logger.info("games_added bolao_id=%s count=%s", pool.id, len(rows))
        return rows

    def draw_status(self, session: Session, pool: Pool) -> tuple[DrawStatus, Draw | None]:
        draw = self._draws.get_draw(session, pool.draw_number)
        if draw is None:
            return DrawStatus.PENDING, None
        return DrawStatus.RESOLVED, draw

    def pool_view(self, session: Session, pool: Pool) -> PoolView:
        status, draw = self.draw_status(session, pool)
        games = self._games.list_games(session, pool.id)
        match = match_games(games, draw.numbers if draw is not None else None)
        return PoolView(pool=pool, status=status, draw=draw, match=match)

    def next_draw_summary(self) -> DrawSummary:
        if self._client is None:
            raise LotteryApiError("No lottery client configured")
        return self._client.fetch_summary()
