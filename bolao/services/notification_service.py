"""Send results mails to verified subscribers once a draw is stored."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from bolao.models.draw import Draw
from bolao.repositories.game_repository import GameRepository
from bolao.repositories.pool_repository import PoolRepository
from bolao.repositories.subscriber_repository import SubscriberRepository
from bolao.services.hit_matcher import match_games
from bolao.services.mailer import Mailer, OutgoingMail, pool_sender
from bolao.services.messages import results_message


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationReport:
    sent: int = 0
    failed: int = 0


class NotificationService:
    """Decide who gets a results mail for a draw, and send it."""

    def __init__(
        self,
        mailer: Mailer,
        *,
        from_domain: str,
        pools: PoolRepository | None = None,
        games: GameRepository | None = None,
        subscribers: SubscriberRepository | None = None,
    ) -> None:
        self._mailer = mailer
        self._from_domain = from_domain
        self._pools = pools or PoolRepository()
        self._games = games or GameRepository()
        self._subscribers = subscribers or SubscriberRepository()

    def notify_subscribers_for_draw(self, session: Session, draw: Draw) -> NotificationReport:
        """Mail every verified subscriber not yet told about ``draw``.

        A failed send is logged and leaves ``last_notified_draw`` untouched
        so the next poll retries it. Each successful send is committed on
        its own.
        """

        sent = 0
        failed = 0
        for pool in self._pools.list_by_draw_number(session, draw.number):
            pending = self._subscribers.list_verified_subscribers_pending_notification(
                session, pool.id, draw.number
            )
            if not pending:
                continue

            match = match_games(self._games.list_games(session, pool.id), draw.numbers)
            content = results_message(pool, draw, match)
            sender = pool_sender(pool.display_name, pool.id, self._from_domain)

            for subscriber in pending:
                mail = OutgoingMail(
                    sender=sender,
                    recipient=subscriber.email,
                    subject=content.subject,
                    text=content.text,
                    html=content.html,
                )
                try:
                    self._mailer.send(mail)
                except Exception:
                    failed += 1
                    logger.exception("Falha ao enviar resultado para %s", subscriber.email)
                    continue

                self._subscribers.mark_notified(session, subscriber.id, draw.number)
                session.commit()
                sent += 1
                logger.info(
                    "results_sent bolao_id=%s email=%s draw_number=%s",
                    pool.id,
                    subscriber.email,
                    draw.number,
                )

        return NotificationReport(sent=sent, failed=failed)
