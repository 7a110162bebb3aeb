"""Flask application package."""

from __future__ import annotations

import atexit
from collections.abc import Mapping
from typing import Any

from dotenv import load_dotenv
from flask import Flask

from bolao.services.lottery_client import LotteryClient
from bolao.services.mailer import Mailer


def create_app(
    config: Mapping[str, Any] | None = None,
    *,
    lottery_client: LotteryClient | None = None,
    mailer: Mailer | None = None,
) -> Flask:
    """Application factory.

    Args:
        config: Overrides applied on top of the environment configuration.
        lottery_client: Results API client to use instead of the default.
        mailer: Mail transport to use instead of SMTP.

    Returns:
        Configured Flask application.
    """
    load_dotenv()

    from bolao.cli import register_cli
    from bolao.config import get_config
    from bolao.db import init_db
    from bolao.error_handlers import register_error_handlers
    from bolao.logging_config import configure_logging
    from bolao.routes.draws import draws_bp
    from bolao.routes.health import health_bp
    from bolao.routes.pools import pools_bp
    from bolao.services.registry import build_services

    app = Flask(__name__)
    app.config.from_object(get_config())
    if config:
        app.config.update(config)

    configure_logging(app)
    init_db(app)
    register_error_handlers(app)
    register_cli(app)

    services = build_services(
        app.config,
        app.extensions["session_factory"],
        client=lottery_client,
        mailer=mailer,
    )
    app.extensions["bolao"] = services

    app.register_blueprint(health_bp)
    app.register_blueprint(pools_bp, url_prefix="/api")
    app.register_blueprint(draws_bp, url_prefix="/api")

    return app


def start_poller(app: Flask) -> bool:
    """Start the app's draw poller unless disabled; stopped at interpreter exit."""

    if not app.config.get("POLLER_ENABLED") or app.config.get("TESTING"):
        return False

    poller = app.extensions["bolao"].poller
    poller.start()
    atexit.register(poller.stop)
    return True
