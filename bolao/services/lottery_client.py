"""HTTP client for the official Mega-Sena results API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from bolao.utils.numbers import DRAW_SIZE, pad


logger = logging.getLogger(__name__)


class LotteryApiError(Exception):
    """The results API could not be reached or answered with bad data."""


@dataclass(frozen=True)
class DrawResult:
    number: int
    numbers: list[str]
    draw_date: str


@dataclass(frozen=True)
class DrawSummary:
    latest_number: int
    latest_draw_date: str | None
    next_number: int
    next_draw_date: str | None


def _build_http_session(retries: int, backoff_factor: float) -> requests.Session:
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=backoff_factor,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET",),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)

    session = requests.Session()
    session.headers.update({"User-Agent": "Mozilla/5.0", "Accept": "application/json"})
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class LotteryClient:
    """Fetch results from ``<base_url>`` (latest) or ``<base_url><number>``."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 10.0,
        retries: int = 2,
        backoff_factor: float = 0.5,
        http: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self._timeout = timeout_seconds
        self._http = http or _build_http_session(retries, backoff_factor)

    def _get_json(self, url: str) -> dict[str, Any]:
        logger.debug("GET %s", url)
        try:
            resp = self._http.get(url, timeout=self._timeout)
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise LotteryApiError(f"GET {url} failed: {exc}") from exc

        if not isinstance(payload, dict):
            raise LotteryApiError(f"GET {url} returned {type(payload).__name__}, expected object")
        return payload

    @staticmethod
    def _parse_draw(payload: dict[str, Any]) -> DrawResult:
        number = payload.get("numero")
        numbers = payload.get("listaDezenas")
        if not number or not isinstance(numbers, list) or not numbers:
            raise LotteryApiError("Resposta inválida da API")

        try:
            padded = sorted({pad(n) for n in numbers})
            if len(padded) != DRAW_SIZE:
                raise ValueError(f"expected {DRAW_SIZE} numbers, got {numbers}")
            return DrawResult(
                number=int(number),
                numbers=padded,
                draw_date=str(payload.get("dataApuracao") or ""),
            )
        except (TypeError, ValueError) as exc:
            raise LotteryApiError("Resposta inválida da API") from exc

    def fetch_latest_draw(self) -> DrawResult:
        return self._parse_draw(self._get_json(self._base_url))

    def fetch_draw(self, number: int) -> DrawResult:
        draw = self._parse_draw(self._get_json(f"{self._base_url}{int(number)}"))
        if draw.number != int(number):
            raise LotteryApiError(f"Asked for concurso {number}, API answered {draw.number}")
        return draw

    def fetch_summary(self) -> DrawSummary:
        payload = self._get_json(self._base_url)
        latest = payload.get("numero")
        next_number = payload.get("numeroConcursoProximo")
        if not latest or not next_number:
            raise LotteryApiError("Resposta inválida da API")

        try:
            return DrawSummary(
                latest_number=int(latest),
                latest_draw_date=payload.get("dataApuracao"),
                next_number=int(next_number),
                next_draw_date=payload.get("dataProximoConcurso"),
            )
        except (TypeError, ValueError) as exc:
            raise LotteryApiError("Resposta inválida da API") from exc
