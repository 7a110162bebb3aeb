"""Centralized error handlers.

Every handler answers with the ``fail`` envelope and rolls the request
session back first: teardown sees a handled error as a clean exit and
would otherwise commit whatever was flushed before the failure.
"""

from __future__ import annotations

import logging

from flask import Flask, g
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from bolao.errors import AppError, ConflictError, UpstreamError, ValidationError
from bolao.utils.responses import fail

logger = logging.getLogger(__name__)


def _rollback() -> None:
    session = getattr(g, "db", None)
    if session is not None:
        session.rollback()


def _render(exc: AppError):
    return fail(exc.code, exc.message, exc.status_code, exc.details)


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the Flask app."""

    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        _rollback()
        if isinstance(exc, UpstreamError):
            logger.warning("upstream_failed code=%s message=%s", exc.code, exc.message)
        return _render(exc)

    @app.errorhandler(MarshmallowValidationError)
    def _handle_schema_error(exc: MarshmallowValidationError):
        _rollback()
        # exc.messages maps field -> list[str]
        return _render(ValidationError(details=exc.messages))

    @app.errorhandler(IntegrityError)
    def _handle_integrity_error(exc: IntegrityError):
        _rollback()
        logger.info("Integrity error", exc_info=exc)
        return _render(ConflictError(details=str(exc.orig) if exc.orig else str(exc)))

    @app.errorhandler(HTTPException)
    def _handle_http_exception(exc: HTTPException):
        status = int(exc.code or 500)
        if status == 404:
            return fail("not_found", "Página não encontrada.", 404)
        if status == 405:
            return fail("method_not_allowed", "Método não permitido.", 405)

        return fail(
            "http_error",
            exc.description or "Erro HTTP.",
            status,
            details={"name": exc.name},
        )

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        _rollback()
        logger.exception("Unhandled exception")
        return fail("internal_error", "Erro interno do servidor.", 500)
