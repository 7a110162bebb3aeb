"""Wiring of services for one Flask app."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from flask import current_app
from sqlalchemy.orm import Session, sessionmaker

from bolao.services.draw_poller import DrawPoller
from bolao.services.draw_service import DrawService
from bolao.services.lottery_client import LotteryClient
from bolao.services.mailer import Mailer, SmtpMailer
from bolao.services.notification_service import NotificationService
from bolao.services.pool_service import PoolService
from bolao.services.subscription_service import SubscriptionService


@dataclass
class Services:
    client: LotteryClient
    mailer: Mailer
    pools: PoolService
    subscriptions: SubscriptionService
    notifications: NotificationService
    draws: DrawService
    poller: DrawPoller


def build_services(
    config: Mapping[str, Any],
    session_factory: sessionmaker[Session],
    *,
    client: LotteryClient | None = None,
    mailer: Mailer | None = None,
) -> Services:
    client = client or LotteryClient(
        str(config["LOTTERY_API_URL"]),
        timeout_seconds=float(config.get("LOTTERY_API_TIMEOUT", 10.0)),
    )
    mailer = mailer or SmtpMailer.from_config(config)
    timezone = str(config.get("TIMEZONE", "America/Sao_Paulo"))
    from_domain = str(config.get("FROM_DOMAIN", "bru.to"))

    notifications = NotificationService(mailer, from_domain=from_domain)
    draws = DrawService(notifications, timezone=timezone)
    return Services(
        client=client,
        mailer=mailer,
        pools=PoolService(client, timezone=timezone),
        subscriptions=SubscriptionService(
            mailer,
            share_base_url=str(config.get("SHARE_BASE_URL", "")),
            from_domain=from_domain,
        ),
        notifications=notifications,
        draws=draws,
        poller=DrawPoller(
            session_factory,
            client,
            draws,
            interval_seconds=float(config.get("POLL_INTERVAL_SECONDS", 300.0)),
        ),
    )


def get_services() -> Services:
    return current_app.extensions["bolao"]
