"""Draw routes (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint

from bolao.db import get_session
from bolao.errors import UpstreamError
from bolao.schemas.pool import DrawSchema, DrawSummarySchema
from bolao.services.lottery_client import LotteryApiError
from bolao.services.registry import get_services
from bolao.utils.responses import ok


draws_bp = Blueprint("draws", __name__)

_draw_schema = DrawSchema()
_summary_schema = DrawSummarySchema()


@draws_bp.get("/draws/next")
def next_draw():
    """Latest and next concurso as reported by the results API."""

    try:
        summary = get_services().pools.next_draw_summary()
    except LotteryApiError as exc:
        raise UpstreamError(message="Falha ao carregar próximo concurso.") from exc
    return ok(_summary_schema.dump(summary))


@draws_bp.get("/draws/<int:number>")
def get_draw(number: int):
    draw = get_services().draws.get_draw(get_session(), number)
    return ok(_draw_schema.dump(draw))
