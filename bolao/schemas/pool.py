"""Schemas for the pool API."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates_schema

from bolao.utils.numbers import (
    MAX_DEZENA,
    MAX_DRAW_NUMBER,
    MAX_GAME_SIZE,
    MAX_NAME_LENGTH,
    MIN_DEZENA,
    MIN_DRAW_NUMBER,
    MIN_GAME_SIZE,
)


class PoolCreateSchema(Schema):
    name = fields.String(
        required=False,
        load_default=None,
        allow_none=True,
        validate=validate.Length(max=MAX_NAME_LENGTH),
    )
    draw_number = fields.Integer(
        required=True,
        strict=True,
        validate=validate.Range(min=MIN_DRAW_NUMBER, max=MAX_DRAW_NUMBER),
    )


class PoolUpdateSchema(Schema):
    name = fields.String(required=False, allow_none=True, validate=validate.Length(max=MAX_NAME_LENGTH))
    draw_number = fields.Integer(
        required=False,
        strict=True,
        validate=validate.Range(min=MIN_DRAW_NUMBER, max=MAX_DRAW_NUMBER),
    )


class GamesCreateSchema(Schema):
    """Either ``games`` (list of lists) or ``text`` (one game per line)."""

    games = fields.List(
        fields.List(
            fields.Integer(strict=True, validate=validate.Range(min=MIN_DEZENA, max=MAX_DEZENA)),
            validate=validate.Length(min=MIN_GAME_SIZE, max=MAX_GAME_SIZE),
        ),
        required=False,
        load_default=None,
        validate=validate.Length(min=1, max=500),
    )
    text = fields.String(required=False, load_default=None)

    @validates_schema
    def _validate_one_source(self, data, **kwargs):  # type: ignore[no-untyped-def]
        games = data.get("games")
        text = data.get("text")
        if games is None and not (text or "").strip():
            raise ValidationError({"games": ["Informe ao menos um jogo."]})
        if games is not None and text:
            raise ValidationError({"text": ["Use games ou text, não ambos."]})

        if games is not None:
            bad_idx = [i + 1 for i, game in enumerate(games) if len(set(game)) != len(game)]
            if bad_idx:
                raise ValidationError(
                    {"games": [f"Dezenas repetidas (jogos: {', '.join(str(i) for i in bad_idx)})"]}
                )


class SubscribeSchema(Schema):
    email = fields.Email(required=True)


class DrawSchema(Schema):
    number = fields.Int()
    numbers = fields.List(fields.Str())
    draw_date = fields.Str()
    updated_at = fields.DateTime()


class GameStatsSchema(Schema):
    id = fields.Int(attribute="game_id")
    numbers = fields.List(fields.Str())
    hits = fields.List(fields.Str())
    hit_count = fields.Int()
    size = fields.Int()


class GameSchema(Schema):
    id = fields.Int()
    numbers = fields.List(fields.Str())
    created_at = fields.DateTime()


class PoolSchema(Schema):
    """Public representation; never carries the edit token."""

    id = fields.Str()
    name = fields.Str(allow_none=True)
    display_name = fields.Str()
    draw_number = fields.Int()
    created_at = fields.DateTime()


class SubscriberSchema(Schema):
    email = fields.Str()
    status = fields.Str()
    created_at = fields.DateTime()
    verified_at = fields.DateTime(allow_none=True)
    last_notified_draw = fields.Int(allow_none=True)


class DrawSummarySchema(Schema):
    latest_number = fields.Int()
    latest_draw_date = fields.Str(allow_none=True)
    next_number = fields.Int()
    next_draw_date = fields.Str(allow_none=True)
