"""Pool routes (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from bolao.db import get_session
from bolao.models.pool import Pool
from bolao.schemas.pool import (
    DrawSchema,
    GameSchema,
    GameStatsSchema,
    GamesCreateSchema,
    PoolCreateSchema,
    PoolSchema,
    PoolUpdateSchema,
    SubscribeSchema,
    SubscriberSchema,
)
from bolao.services.messages import admin_link, share_link
from bolao.services.registry import get_services
from bolao.utils.numbers import parse_games_input
from bolao.utils.responses import ok


pools_bp = Blueprint("pools", __name__)

_create_schema = PoolCreateSchema()
_update_schema = PoolUpdateSchema()
_games_schema = GamesCreateSchema()
_subscribe_schema = SubscribeSchema()
_pool_schema = PoolSchema()
_draw_schema = DrawSchema()
_game_schema = GameSchema(many=True)
_stats_schema = GameStatsSchema(many=True)
_subscriber_schema = SubscriberSchema(many=True)


def _edit_token() -> str | None:
    return request.headers.get("X-Edit-Token") or request.args.get("token")


def _links(pool: Pool, owner: bool) -> dict[str, str]:
    base = str(current_app.config["SHARE_BASE_URL"])
    links = {"share": share_link(base, pool)}
    if owner:
        links["admin"] = admin_link(base, pool)
    return links


@pools_bp.post("/pools")
def create_pool():
    payload = request.get_json(silent=True) or {}
    data = _create_schema.load(payload)

    pool = get_services().pools.create_pool(
        get_session(),
        name=data.get("name"),
        draw_number=data["draw_number"],
    )

    body = _pool_schema.dump(pool)
    body["edit_token"] = pool.edit_token
    body["links"] = _links(pool, owner=True)
    return ok(body, status_code=201)


@pools_bp.get("/pools/<pool_id>")
def get_pool(pool_id: str):
    services = get_services()
    session = get_session()
    pool = services.pools.get_pool(session, pool_id)
    view = services.pools.pool_view(session, pool)
    owner = services.pools.is_owner(pool, _edit_token())

    return ok(
        {
            "pool": _pool_schema.dump(pool),
            "status": view.status.value,
            "draw": _draw_schema.dump(view.draw) if view.draw is not None else None,
            "games": _stats_schema.dump(view.match.games),
            "max_hits": view.match.max_hits,
            "achievement": view.match.achievement.value if view.match.achievement else None,
            "owner": owner,
            "links": _links(pool, owner),
        }
    )


@pools_bp.patch("/pools/<pool_id>")
def update_pool(pool_id: str):
    payload = request.get_json(silent=True) or {}
    data = _update_schema.load(payload)

    services = get_services()
    session = get_session()
    pool = services.pools.get_pool(session, pool_id)
    pool = services.pools.update_pool(
        session,
        pool,
        _edit_token(),
        name=data.get("name"),
        draw_number=data.get("draw_number"),
        update_name="name" in data,
    )
    return ok(_pool_schema.dump(pool))


@pools_bp.post("/pools/<pool_id>/games")
def add_games(pool_id: str):
    payload = request.get_json(silent=True) or {}
    data = _games_schema.load(payload)

    services = get_services()
    session = get_session()
    pool = services.pools.get_pool(session, pool_id)
    services.pools.authorize(pool, _edit_token())

    games = data["games"] if data.get("games") is not None else parse_games_input(data["text"])
    rows = services.pools.add_games(session, pool, _edit_token(), games)

    # Commit occurs in teardown if no exception.
    return ok(_game_schema.dump(rows), status_code=201)


@pools_bp.post("/pools/<pool_id>/subscribers")
def subscribe(pool_id: str):
    payload = request.get_json(silent=True) or {}
    data = _subscribe_schema.load(payload)

    services = get_services()
    session = get_session()
    pool = services.pools.get_pool(session, pool_id)
    subscriber = services.subscriptions.subscribe(session, pool, data["email"])
    return ok({"email": subscriber.email, "status": subscriber.status}, status_code=202)


@pools_bp.get("/pools/<pool_id>/confirm")
def confirm_subscription(pool_id: str):
    services = get_services()
    session = get_session()
    pool = services.pools.get_pool(session, pool_id)
    subscriber = services.subscriptions.confirm(session, pool, request.args.get("token"))
    return ok({"email": subscriber.email, "status": subscriber.status})


@pools_bp.get("/pools/<pool_id>/subscribers")
def list_subscribers(pool_id: str):
    services = get_services()
    session = get_session()
    pool = services.pools.get_pool(session, pool_id)
    services.pools.authorize(pool, _edit_token())
    return ok(_subscriber_schema.dump(services.subscriptions.list_subscribers(session, pool)))
