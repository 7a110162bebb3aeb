"""Background polling of the results API.

One tick: retry missed mails -> check pending pools -> fetch -> store ->
notify. Every tick is independent; failures are logged and the next tick
starts from scratch.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from bolao.models.draw import Draw
from bolao.repositories.draw_repository import DrawRepository
from bolao.repositories.pool_repository import PoolRepository
from bolao.repositories.subscriber_repository import SubscriberRepository
from bolao.services.draw_service import DrawService
from bolao.services.lottery_client import DrawResult, LotteryApiError, LotteryClient


logger = logging.getLogger(__name__)


class PollOutcome(str, Enum):
    IDLE = "idle"
    CHECK_FAILED = "check_failed"
    FETCH_FAILED = "fetch_failed"
    STORE_FAILED = "store_failed"
    STORED = "stored"


@dataclass
class PollResult:
    outcome: PollOutcome
    stored: list[int] = field(default_factory=list)
    retried: list[int] = field(default_factory=list)


class DrawPoller:
    """Owns the polling thread; ``start()`` and ``stop()`` bound its life."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        client: LotteryClient,
        draw_service: DrawService,
        *,
        interval_seconds: float = 300.0,
        pools: PoolRepository | None = None,
        draws: DrawRepository | None = None,
        subscribers: SubscriberRepository | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._client = client
        self._draw_service = draw_service
        self._interval = float(interval_seconds)
        self._pools = pools or PoolRepository()
        self._draws = draws or DrawRepository()
        self._subscribers = subscribers or SubscriberRepository()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            if self._stop_event.is_set():
                logger.warning("Draw poller is still finishing its last tick; not restarted")
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="draw-poller", daemon=True)
        self._thread.start()
        logger.info("Draw poller started (interval=%ss)", self._interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        if thread is not None and thread.is_alive():
            # Keep the handle so start() cannot spawn a second loop.
            logger.warning("Draw poller did not stop within %ss", timeout)
            return
        self._thread = None
        logger.info("Draw poller stopped")

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.poll_once()
            except Exception:
                logger.exception("Unexpected error in draw poller tick")
            if self._stop_event.wait(self._interval):
                break

    def poll_once(self) -> PollResult:
        """Run one tick. Never raises for API, mail or database failures."""

        with self._session_factory() as session:
            retried = self._retry_notifications(session)

            try:
                pending = self._pools.list_pending_draw_numbers(session)
            except SQLAlchemyError:
                session.rollback()
                logger.exception("Falha ao verificar bolões pendentes")
                return PollResult(PollOutcome.CHECK_FAILED, retried=retried)

            if not pending:
                return PollResult(PollOutcome.IDLE, retried=retried)

            try:
                latest = self._client.fetch_latest_draw()
            except LotteryApiError:
                logger.exception("Falha ao buscar concurso")
                return PollResult(PollOutcome.FETCH_FAILED, retried=retried)

            if not self._store_and_notify(session, latest):
                return PollResult(PollOutcome.STORE_FAILED, retried=retried)

            result = PollResult(PollOutcome.STORED, stored=[latest.number], retried=retried)

            # Targets below the latest concurso were already drawn; ask for them by number.
            for number in pending:
                if number >= latest.number:
                    break
                try:
                    past = self._client.fetch_draw(number)
                except LotteryApiError:
                    logger.exception("Falha ao buscar concurso %s", number)
                    continue
                if self._store_and_notify(session, past):
                    result.stored.append(past.number)

            return result

    def _retry_notifications(self, session: Session) -> list[int]:
        """Mail subscribers of stored draws that a previous tick missed."""

        try:
            numbers = self._subscribers.list_draw_numbers_pending_notification(session)
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Falha ao verificar notificações pendentes")
            return []

        done: list[int] = []
        for number in numbers:
            try:
                draw = self._draws.get_draw(session, number)
            except SQLAlchemyError:
                session.rollback()
                logger.exception("Falha ao carregar concurso %s", number)
                continue
            if draw is not None and self._notify(session, draw):
                done.append(number)
        return done

    def _store_and_notify(self, session: Session, fetched: DrawResult) -> bool:
        try:
            draw = self._draw_service.store(session, fetched)
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Falha ao salvar concurso %s", fetched.number)
            return False

        self._notify(session, draw)
        return True

    def _notify(self, session: Session, draw: Draw) -> bool:
        try:
            self._draw_service.notify(session, draw)
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Falha ao notificar assinantes do concurso %s", draw.number)
            return False
        return True
