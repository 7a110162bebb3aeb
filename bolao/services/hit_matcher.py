"""Match registered games against a draw.

Pure functions: no session, no I/O.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class GameLike(Protocol):
    id: int
    numbers: list[str]


class Achievement(str, Enum):
    QUADRA = "quadra"
    QUINA = "quina"
    SENA = "sena"


_ACHIEVEMENT_BY_HITS = {
    6: Achievement.SENA,
    5: Achievement.QUINA,
    4: Achievement.QUADRA,
}

ACHIEVEMENT_TITLES = {
    Achievement.SENA: "Você acertou a sena!",
    Achievement.QUINA: "Você acertou a quina!",
    Achievement.QUADRA: "Você acertou a quadra!",
}


@dataclass(frozen=True)
class GameStats:
    game_id: int
    numbers: tuple[str, ...]
    hits: tuple[str, ...]

    @property
    def hit_count(self) -> int:
        return len(self.hits)

    @property
    def size(self) -> int:
        return len(self.numbers)


def hit_count(game_numbers: Iterable[str], drawn_numbers: Iterable[str] | None) -> int:
    if drawn_numbers is None:
        return 0
    return len(set(game_numbers) & set(drawn_numbers))


def compute_game_stats(games: Iterable[GameLike], drawn_numbers: Iterable[str] | None) -> list[GameStats]:
    drawn = set(drawn_numbers) if drawn_numbers is not None else None
    stats: list[GameStats] = []
    for game in games:
        numbers = tuple(game.numbers)
        hits = tuple(n for n in numbers if n in drawn) if drawn is not None else ()
        stats.append(GameStats(game_id=int(game.id), numbers=numbers, hits=hits))
    return stats


def sort_game_stats(stats: Iterable[GameStats], has_draw: bool) -> list[GameStats]:
    """Hits desc (only with a draw), then size desc, then newest first."""

    def _key(s: GameStats) -> tuple[int, int, int]:
        return (-s.hit_count if has_draw else 0, -s.size, -s.game_id)

    return sorted(stats, key=_key)


def max_hits(stats: Sequence[GameStats]) -> int:
    return max((s.hit_count for s in stats), default=0)


def achievement_for(hits: int) -> Achievement | None:
    return _ACHIEVEMENT_BY_HITS.get(hits)


def hit_label(hits: int) -> str:
    if hits >= 6:
        return "Premiado!"
    if hits >= 4:
        return "Boa!"
    return "Confira"


@dataclass(frozen=True)
class MatchResult:
    games: list[GameStats]
    max_hits: int
    achievement: Achievement | None


def match_games(games: Iterable[GameLike], drawn_numbers: Iterable[str] | None) -> MatchResult:
    """Rank games against the draw (or by size alone when there is none)."""

    drawn = list(drawn_numbers) if drawn_numbers is not None else None
    stats = compute_game_stats(games, drawn)
    best = max_hits(stats)
    return MatchResult(
        games=sort_game_stats(stats, has_draw=drawn is not None),
        max_hits=best,
        achievement=achievement_for(best) if drawn is not None else None,
    )
