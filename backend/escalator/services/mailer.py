"""
SMTP Mailer

Sends escalation mails with bounded retries and exponential backoff.
Permanent failures (bad credentials, rejected or malformed recipients) are
not retried.
"""

import html
import logging
import smtplib
import time
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Callable, Optional

from escalator.core.config import Settings, settings

logger = logging.getLogger(__name__)


@dataclass
class MailResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


PERMANENT_ERROR_MARKERS = (
    "Invalid email",
    "Recipient address rejected",
    "Authentication failed",
)

PERMANENT_ERROR_TYPES = (
    smtplib.SMTPAuthenticationError,
    smtplib.SMTPRecipientsRefused,
    smtplib.SMTPSenderRefused,
    smtplib.SMTPNotSupportedError,
)


def is_permanent_failure(error: Exception) -> bool:
    if isinstance(error, PERMANENT_ERROR_TYPES):
        return True
    message = str(error)
    return any(marker in message for marker in PERMANENT_ERROR_MARKERS)


class Mailer:

    def __init__(
        self,
        host: Optional[str],
        port: Optional[int],
        user: Optional[str],
        password: Optional[str],
        sender: Optional[str],
        use_tls: bool = True,
        max_retries: int = 3,
        backoff_seconds: float = 1.0,
        timeout: int = 30,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender
        self.use_tls = use_tls
        self.max_retries = max(1, max_retries)
        self.backoff_seconds = backoff_seconds
        self.timeout = timeout
        self.smtp_factory = smtp_factory
        self.sleep = sleep

        if self.is_configured():
            logger.info(f"SMTP mailer configured for {host}:{port}")
        else:
            logger.warning("SMTP configuration incomplete. Email functionality will be disabled.")

    @classmethod
    def from_settings(cls, config: Settings) -> "Mailer":
        return cls(
            host=config.SMTP_HOST,
            port=config.SMTP_PORT,
            user=config.SMTP_USER,
            password=config.SMTP_PASS,
            sender=config.SMTP_FROM,
            use_tls=config.SMTP_USE_TLS,
            max_retries=config.MAIL_MAX_RETRIES,
            backoff_seconds=config.MAIL_BACKOFF_SECONDS,
        )

    def is_configured(self) -> bool:
        return all([self.host, self.port, self.user, self.password, self.sender])

    def _build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid()
        message.set_content(body)
        message.add_alternative(f"<pre>{html.escape(body)}</pre>", subtype="html")
        return message

    def _open(self) -> smtplib.SMTP:
        return self.smtp_factory(self.host, self.port, timeout=self.timeout)

    def _login(self, client: smtplib.SMTP) -> None:
        if self.use_tls:
            client.starttls()
        client.login(self.user, self.password)

    def _deliver(self, message: EmailMessage) -> None:
        # closed on every path, failed logins included
        with self._open() as client:
            self._login(client)
            client.send_message(message)

    def send(self, to: str, subject: str, body: str) -> MailResult:
        if not self.is_configured():
            return MailResult(success=False, error="Email service not configured")

        message = self._build_message(to, subject, body)
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_retries + 1):
            try:
                self._deliver(message)
                logger.info(f"Sent mail to {to} on attempt {attempt}")
                return MailResult(success=True, message_id=message["Message-ID"])

            except (smtplib.SMTPException, OSError) as e:
                last_error = e
                logger.warning(f"Email send attempt {attempt} failed: {e}")

                if is_permanent_failure(e):
                    break

                if attempt < self.max_retries:
                    self.sleep(self.backoff_seconds * 2 ** attempt)

        return MailResult(
            success=False,
            error=str(last_error) if last_error else "Unknown error occurred"
        )

    def verify_connection(self) -> bool:
        if not self.is_configured():
            return False

        try:
            with self._open() as client:
                self._login(client)
                client.noop()
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP connection verification failed: {e}")
            return False


mailer = Mailer.from_settings(settings)
