from __future__ import annotations

import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from typing import Any, Mapping, Optional, Protocol

from ..core.exceptions import DeliveryError

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send(self, *, to: str, subject: str, text: str, html: str) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class SmtpSettings:
    host: str
    port: int = 587
    # Implicit TLS (SMTPS); otherwise STARTTLS when the server offers it
    secure: bool = False
    user: Optional[str] = None
    password: Optional[str] = None
    from_address: str = "no-reply@example.com"
    from_name: str = "HRM"
    timeout: float = 30.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SmtpSettings":
        return cls(
            host=str(data.get("host") or "localhost"),
            port=int(data.get("port") or 587),
            secure=bool(data.get("secure", False)),
            user=data.get("user") or None,
            password=data.get("password") or None,
            from_address=str(data.get("from_address") or cls.from_address),
            from_name=str(data.get("from_name") or cls.from_name),
            timeout=float(data.get("timeout") or 30.0),
        )


class SmtpMailer(Mailer):
    """Sends multipart (text + HTML) mail through one SMTP connection per message."""

    def __init__(self, settings: SmtpSettings):
        self._settings = settings

    def _connect(self) -> smtplib.SMTP:
        s = self._settings
        if s.secure:
            return smtplib.SMTP_SSL(s.host, s.port, timeout=s.timeout, context=ssl.create_default_context())
        return smtplib.SMTP(s.host, s.port, timeout=s.timeout)

    def _build_message(self, *, to: str, subject: str, text: str, html: str) -> EmailMessage:
        s = self._settings
        msg = EmailMessage()
        msg["From"] = formataddr((s.from_name, s.from_address))
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(text)
        msg.add_alternative(html, subtype="html")
        return msg

    def send(self, *, to: str, subject: str, text: str, html: str) -> None:
        s = self._settings
        msg = self._build_message(to=to, subject=subject, text=text, html=html)
        try:
            with self._connect() as smtp:
                if not s.secure:
                    smtp.ehlo()
                    if smtp.has_extn("starttls"):
                        smtp.starttls(context=ssl.create_default_context())
                if s.user:
                    smtp.login(s.user, s.password or "")
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise DeliveryError(f"Failed to send email to {to}: {exc}") from exc
        logger.info("Email sent to %s via %s:%s", to, s.host, s.port)
