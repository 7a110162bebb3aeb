"""Storing official results: API fetches, manual entries and deletions."""

from __future__ import annotations

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from bolao.errors import NotFoundError
from bolao.models.draw import Draw
from bolao.repositories.draw_repository import DrawRepository
from bolao.repositories.subscriber_repository import SubscriberRepository
from bolao.services.lottery_client import DrawResult
from bolao.services.notification_service import NotificationReport, NotificationService
from bolao.utils.numbers import parse_draw_number, parse_result_numbers


logger = logging.getLogger(__name__)


class DrawService:
    """Upsert draws and trigger subscriber notification."""

    def __init__(
        self,
        notifications: NotificationService,
        *,
        timezone: str = "America/Sao_Paulo",
        draws: DrawRepository | None = None,
        subscribers: SubscriberRepository | None = None,
    ) -> None:
        self._notifications = notifications
        self._tz = ZoneInfo(timezone)
        self._draws = draws or DrawRepository()
        self._subscribers = subscribers or SubscriberRepository()

    def get_draw(self, session: Session, number: int) -> Draw:
        draw = self._draws.get_draw(session, number)
        if draw is None:
            raise NotFoundError(message=f"Concurso {number} não encontrado.")
        return draw

    def list_draws(self, session: Session) -> list[Draw]:
        return list(self._draws.list_all(session))

    def store(self, session: Session, result: DrawResult) -> Draw:
        draw = self._draws.upsert_draw(
            session,
            number=result.number,
            numbers=list(result.numbers),
            draw_date=result.draw_date,
        )
        logger.info("draw_stored number=%s numbers=%s", draw.number, " ".join(draw.numbers))
        return draw

    def notify(self, session: Session, draw: Draw) -> NotificationReport:
        return self._notifications.notify_subscribers_for_draw(session, draw)

    def set_manual_draw(
        self,
        session: Session,
        number: object,
        numbers_text: str,
        draw_date: str | None = None,
    ) -> tuple[Draw, NotificationReport]:
        """Record a result typed in by an operator, then notify."""

        draw_number = parse_draw_number(number)
        numbers = parse_result_numbers(numbers_text)
        date_label = draw_date or datetime.now(self._tz).strftime("%d/%m/%Y")

        draw = self.store(session, DrawResult(number=draw_number, numbers=numbers, draw_date=date_label))
        session.commit()
        logger.info("draw_manual_added number=%s numbers=%s", draw_number, " ".join(numbers))

        return draw, self.notify(session, draw)

    def delete_draw(self, session: Session, number: object) -> int:
        """Delete a draw; subscribers notified of it become eligible again.

        Returns how many subscribers were reset.
        """

        draw_number = parse_draw_number(number)
        draw = self.get_draw(session, draw_number)

        reset = self._subscribers.reset_notified(session, draw_number)
        self._draws.delete(session, draw)
        logger.info("draw_deleted number=%s subscribers_reset=%s", draw_number, reset)
        return reset
