"""Application errors rendered by the handlers in ``error_handlers``.

Messages are user-facing (pt-BR); ``code`` is the stable machine value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class AppError(Exception):
    """Base application error."""

    code: str
    message: str
    status_code: int
    details: Any | None = None


class NotFoundError(AppError):
    """Unknown pool or concurso."""

    def __init__(self, message: str = "Não encontrado.", details: Any | None = None) -> None:
        super().__init__(code="not_found", message=message, status_code=404, details=details)


class ValidationError(AppError):
    """Bad dezenas, concurso, name, email or token."""

    def __init__(self, message: str = "Dados inválidos.", details: Any | None = None) -> None:
        super().__init__(code="validation_error", message=message, status_code=400, details=details)


class ForbiddenError(AppError):
    """Caller does not hold the pool's edit token."""

    def __init__(self, message: str = "Acesso negado.", details: Any | None = None) -> None:
        super().__init__(code="forbidden", message=message, status_code=403, details=details)


class ConflictError(AppError):
    """A write hit a unique constraint."""

    def __init__(self, message: str = "Conflito ao salvar os dados.", details: Any | None = None) -> None:
        super().__init__(code="conflict", message=message, status_code=409, details=details)


class UpstreamError(AppError):
    """The results API or the SMTP relay failed."""

    def __init__(self, message: str = "Serviço externo indisponível.", details: Any | None = None) -> None:
        super().__init__(code="upstream_error", message=message, status_code=502, details=details)
