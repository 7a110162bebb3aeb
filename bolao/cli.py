"""Operator commands (``flask --app wsgi <command>``)."""

from __future__ import annotations

import logging

import click
from flask import Flask, current_app
from flask.cli import AppGroup, with_appcontext

from bolao.db import session_scope
from bolao.errors import AppError
from bolao.models.base import Base
from bolao.repositories.pool_repository import PoolRepository
from bolao.services.mailer import OutgoingMail, system_sender
from bolao.services.messages import smtp_check_message
from bolao.services.registry import get_services
from bolao.services.subscription_service import normalize_email


draws_cli = AppGroup("draws", help="Manage official draw results.")
pools_cli = AppGroup("pools", help="Inspect and remove pools.")
mail_cli = AppGroup("mail", help="Outgoing mail checks.")

logger = logging.getLogger(__name__)


@click.command("init-db")
@with_appcontext
def init_db_command() -> None:
    """Create all tables in the configured database."""

    Base.metadata.create_all(bind=current_app.extensions["engine"])
    click.echo("Tables created (or already exist).")


@draws_cli.command("poll")
def poll_command() -> None:
    """Run a single poll tick now."""

    result = get_services().poller.poll_once()
    stored = ", ".join(str(n) for n in result.stored) or "-"
    click.echo(f"{result.outcome.value} (stored: {stored})")


@draws_cli.command("set")
@click.argument("number")
@click.argument("numbers")
@click.option("--date", "draw_date", default=None, help="Draw date as dd/mm/yyyy (default: today).")
def set_draw_command(number: str, numbers: str, draw_date: str | None) -> None:
    """Record the result of concurso NUMBER, e.g. `draws set 2700 "04 08 15 16 23 42"`."""

    with session_scope() as session:
        try:
            draw, report = get_services().draws.set_manual_draw(session, number, numbers, draw_date)
        except AppError as exc:
            raise click.ClickException(exc.message) from exc
        click.echo(
            f"Concurso {draw.number}: {' '.join(draw.numbers)} "
            f"({report.sent} emails sent, {report.failed} failed)"
        )


@draws_cli.command("delete")
@click.argument("number")
def delete_draw_command(number: str) -> None:
    """Delete the stored result of concurso NUMBER."""

    with session_scope() as session:
        try:
            reset = get_services().draws.delete_draw(session, number)
        except AppError as exc:
            raise click.ClickException(exc.message) from exc
    click.echo(f"Concurso {number} deleted ({reset} subscribers reset).")


@draws_cli.command("list")
def list_draws_command() -> None:
    with session_scope() as session:
        for draw in get_services().draws.list_draws(session):
            click.echo(f"{draw.number}\t{draw.draw_date}\t{' '.join(draw.numbers)}")


@pools_cli.command("list")
@click.option("--pending", is_flag=True, help="Only pools whose draw is not stored yet.")
def list_pools_command(pending: bool) -> None:
    repo = PoolRepository()
    with session_scope() as session:
        pools = repo.list_pools_missing_draw(session) if pending else repo.list_all(session)
        for pool in pools:
            click.echo(f"{pool.id}\t{pool.draw_number}\t{pool.display_name}")


@pools_cli.command("delete")
@click.argument("pool_id")
def delete_pool_command(pool_id: str) -> None:
    """Delete pool POOL_ID together with its games and subscribers."""

    with session_scope() as session:
        try:
            games = get_services().pools.delete_pool(session, pool_id)
        except AppError as exc:
            raise click.ClickException(exc.message) from exc
    click.echo(f"Bolão {pool_id} deleted ({games} games).")


@mail_cli.command("test")
@click.argument("to")
def mail_test_command(to: str) -> None:
    """Send a test message to TO through the configured SMTP relay."""

    try:
        recipient = normalize_email(to)
    except AppError as exc:
        raise click.ClickException(exc.message) from exc

    content = smtp_check_message()
    mail = OutgoingMail(
        sender=system_sender(str(current_app.config.get("FROM_DOMAIN", "bru.to"))),
        recipient=recipient,
        subject=content.subject,
        text=content.text,
        html=content.html,
    )
    try:
        get_services().mailer.send(mail)
    except Exception as exc:
        logger.exception("Falha ao enviar email de teste")
        raise click.ClickException("Falha ao enviar email de teste.") from exc
    click.echo(f"Test email sent to {recipient}.")


def register_cli(app: Flask) -> None:
    app.cli.add_command(init_db_command)
    app.cli.add_command(draws_cli)
    app.cli.add_command(pools_cli)
    app.cli.add_command(mail_cli)
