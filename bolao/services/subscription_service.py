"""Email subscriptions to a pool's results."""

from __future__ import annotations

import hmac
import logging
import re
from collections.abc import Sequence

from sqlalchemy.orm import Session

from bolao.errors import UpstreamError, ValidationError
from bolao.models.pool import Pool
from bolao.models.subscriber import Subscriber
from bolao.repositories.subscriber_repository import SubscriberRepository
from bolao.services.mailer import Mailer, OutgoingMail, pool_sender
from bolao.services.messages import confirmation_link, verification_message
from bolao.services.pool_service import generate_token


logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(value: object) -> str:
    email = str(value or "").strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError(message="Email inválido.", details={"email": ["Email inválido."]})
    return email


class SubscriptionService:
    def __init__(
        self,
        mailer: Mailer,
        *,
        share_base_url: str,
        from_domain: str,
        subscribers: SubscriberRepository | None = None,
    ) -> None:
        self._mailer = mailer
        self._share_base_url = share_base_url
        self._from_domain = from_domain
        self._subscribers = subscribers or SubscriberRepository()

    def subscribe(self, session: Session, pool: Pool, email: object) -> Subscriber:
        """(Re)start a subscription and mail the confirmation link.

        Subscribing again resets the row to pending and forgets any prior
        verification and notification.
        """

        address = normalize_email(email)
        token = generate_token()
        subscriber = self._subscribers.upsert_pending(session, pool_id=pool.id, email=address, token=token)

        content = verification_message(pool, confirmation_link(self._share_base_url, pool, token))
        mail = OutgoingMail(
            sender=pool_sender(pool.display_name, pool.id, self._from_domain),
            recipient=address,
            subject=content.subject,
            text=content.text,
            html=content.html,
        )
        try:
            self._mailer.send(mail)
        except Exception as exc:
            logger.exception("Falha ao cadastrar assinatura")
            raise UpstreamError(message="Não foi possível enviar o email.") from exc

        logger.info("subscription_requested bolao_id=%s email=%s", pool.id, address)
        return subscriber

    def confirm(self, session: Session, pool: Pool, token: object) -> Subscriber:
        value = str(token or "").strip()
        subscriber = self._subscribers.get_by_token(session, pool.id, value) if value else None
        if subscriber is None or not hmac.compare_digest(subscriber.verification_token or "", value):
            raise ValidationError(message="Link de confirmação inválido ou expirado.")

        self._subscribers.mark_verified(session, subscriber)
        logger.info("subscription_confirmed bolao_id=%s subscriber_id=%s", pool.id, subscriber.id)
        return subscriber

    def list_subscribers(self, session: Session, pool: Pool) -> Sequence[Subscriber]:
        return self._subscribers.list_for_pool(session, pool.id)
