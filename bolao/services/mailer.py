"""Outgoing email over SMTP."""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from typing import Any, Mapping, Protocol


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutgoingMail:
    sender: str
    recipient: str
    subject: str
    text: str
    html: str


class Mailer(Protocol):
    def send(self, mail: OutgoingMail) -> None: ...


def pool_sender(display_name: str, pool_id: str, from_domain: str) -> str:
    """``"Bolão X" <bolao-<id>@domain>``"""

    return formataddr((display_name, f"bolao-{pool_id}@{from_domain}"))


def system_sender(from_domain: str) -> str:
    return formataddr(("Bolão Mega-Sena", f"no-reply@{from_domain}"))


class SmtpMailer:
    """Send multipart (text + html) messages through one SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int,
        *,
        username: str | None = None,
        password: str | None = None,
        use_ssl: bool = False,
        starttls: bool = False,
        timeout: float = 30.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._use_ssl = use_ssl
        self._starttls = starttls
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "SmtpMailer":
        port = int(config.get("SMTP_PORT", 25))
        return cls(
            host=str(config.get("SMTP_HOST", "127.0.0.1")),
            port=port,
            username=config.get("SMTP_USERNAME") or None,
            password=config.get("SMTP_PASSWORD") or None,
            # Port 25 is plain relay delivery.
            use_ssl=bool(config.get("SMTP_SSL")) and port != 25,
            starttls=bool(config.get("SMTP_STARTTLS")),
            timeout=float(config.get("SMTP_TIMEOUT", 30.0)),
        )

    @staticmethod
    def build_message(mail: OutgoingMail) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = mail.sender
        msg["To"] = mail.recipient
        msg["Subject"] = mail.subject
        msg.set_content(mail.text)
        msg.add_alternative(mail.html, subtype="html")
        return msg

    def _connect(self) -> smtplib.SMTP:
        if self._use_ssl:
            return smtplib.SMTP_SSL(self._host, self._port, timeout=self._timeout)
        return smtplib.SMTP(self._host, self._port, timeout=self._timeout)

    def send(self, mail: OutgoingMail) -> None:
        msg = self.build_message(mail)
        with self._connect() as server:
            if self._starttls and not self._use_ssl:
                server.starttls()
            if self._username and self._password:
                server.login(self._username, self._password)
            server.send_message(msg)
        logger.debug("mail_sent to=%s subject=%s", mail.recipient, mail.subject)
