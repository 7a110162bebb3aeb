"""Parsing and normalization of dezenas, games and concurso numbers."""

from __future__ import annotations

import re
from collections.abc import Iterable

from bolao.errors import ValidationError

MIN_DEZENA = 1
MAX_DEZENA = 60
MIN_GAME_SIZE = 6
MAX_GAME_SIZE = 15
DRAW_SIZE = 6
MIN_DRAW_NUMBER = 1
MAX_DRAW_NUMBER = 9999
MAX_NAME_LENGTH = 80

_SEPARATORS = re.compile(r"[\s,;-]+")
_NON_NUMERIC = re.compile(r"[^0-9\s,;-]")


def pad(value: int | str) -> str:
    """Zero-pad a dezena to two characters ("4" -> "04")."""

    return str(int(value)).zfill(2)


def normalize_numbers(values: Iterable[int | str]) -> list[str]:
    """Deduplicate, sort numerically and zero-pad."""

    return [pad(n) for n in sorted({int(v) for v in values})]


def normalize_game(values: Iterable[int | str]) -> list[str]:
    """Validate one game and return its canonical form."""

    try:
        unique = {int(v) for v in values}
    except (TypeError, ValueError) as exc:
        raise ValidationError(message="Use apenas números.") from exc

    if len(unique) < MIN_GAME_SIZE or len(unique) > MAX_GAME_SIZE:
        raise ValidationError(message=f"Informe entre {MIN_GAME_SIZE} e {MAX_GAME_SIZE} dezenas.")
    if any(n < MIN_DEZENA or n > MAX_DEZENA for n in unique):
        raise ValidationError(message=f"As dezenas devem estar entre {MIN_DEZENA} e {MAX_DEZENA}.")

    return normalize_numbers(unique)


def parse_numbers(text: str) -> list[str]:
    """Parse one line like "01 05, 12;23-34 45" into a canonical game."""

    cleaned = _NON_NUMERIC.sub(" ", str(text or ""))
    tokens = [t for t in _SEPARATORS.split(cleaned) if t]
    return normalize_game(tokens)


def parse_games_input(text: str) -> list[list[str]]:
    """Parse free text with one game per line."""

    lines = [line.strip() for line in str(text or "").splitlines()]
    lines = [line for line in lines if line]
    if not lines:
        raise ValidationError(message="Informe ao menos um jogo.")

    games: list[list[str]] = []
    for index, line in enumerate(lines, start=1):
        try:
            games.append(parse_numbers(line))
        except ValidationError as exc:
            raise ValidationError(
                message=f"Linha {index}: {exc.message}",
                details={"line": index},
            ) from exc
    return games


def parse_result_numbers(text: str) -> list[str]:
    """Parse the six numbers of an official result."""

    cleaned = _NON_NUMERIC.sub(" ", str(text or ""))
    tokens = [t for t in _SEPARATORS.split(cleaned) if t]
    if len({int(t) for t in tokens}) != DRAW_SIZE:
        raise ValidationError(message=f"Informe exatamente {DRAW_SIZE} dezenas.")
    numbers = normalize_numbers(tokens)
    if any(int(n) < MIN_DEZENA or int(n) > MAX_DEZENA for n in numbers):
        raise ValidationError(message=f"As dezenas devem estar entre {MIN_DEZENA} e {MAX_DEZENA}.")
    return numbers


def parse_draw_number(value: object) -> int:
    """Validate a concurso number (integer in 1..9999)."""

    try:
        number = int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise ValidationError(message="Número do concurso inválido.") from exc
    if number < MIN_DRAW_NUMBER or number > MAX_DRAW_NUMBER:
        raise ValidationError(message="Número do concurso inválido.")
    return number


def parse_pool_name(value: object) -> str | None:
    """Trim a pool name; empty means "no name"."""

    name = str(value or "").strip()
    if not name:
        return None
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(message=f"O nome do bolão deve ter até {MAX_NAME_LENGTH} caracteres.")
    return name
