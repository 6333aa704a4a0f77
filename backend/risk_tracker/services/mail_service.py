"""
Mail service - SMTP delivery of risk notification emails.

Supports STARTTLS on 587 and SMTPS on 465. When ``dev_mail_dir`` is set,
messages are written there as ``.eml`` files instead of being sent.
"""
import os
import ssl
import socket
import smtplib
import logging
from datetime import datetime
from email.message import EmailMessage

from risk_tracker.config import Settings, get_settings
from risk_tracker.exceptions import EmailFailed

logger = logging.getLogger(__name__)


class MailService:
    """Sends emails with the SMTP settings of the application."""

    def __init__(self, settings: Settings):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.user = settings.smtp_user
        self.password = settings.smtp_password
        self.sender = settings.email_from or settings.smtp_user
        self.timeout = settings.smtp_timeout
        self.dev_mail_dir = settings.dev_mail_dir

    def _configured(self) -> bool:
        return bool(self.host and self.port and self.user and self.password and self.sender)

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self.port == 465:
            server = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout, context=context)
            server.ehlo()
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
            server.ehlo()
            server.starttls(context=context)
            server.ehlo()
        server.login(self.user, self.password)
        return server

    def _write_to_outbox(self, msg: EmailMessage):
        os.makedirs(self.dev_mail_dir, exist_ok=True)
        ts = datetime.utcnow().strftime("%Y%m%d-%H%M%S-%f")
        path = os.path.join(self.dev_mail_dir, f"{ts}-{msg['To']}.eml")
        with open(path, "w", encoding="utf-8") as f:
            f.write(msg.as_string())
        logger.info(f"Email written to dev outbox: {path}")

    def send(self, to_email: str, subject: str, text: str):
        """Send a plain-text email; raises EmailFailed on any delivery problem."""
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender or "<unset>"
        msg["To"] = to_email
        msg.set_content(text)

        if self.dev_mail_dir:
            try:
                self._write_to_outbox(msg)
            except OSError as e:
                raise EmailFailed(f"OUTBOX_ERROR: {e}") from e
            return

        if not self._configured():
            raise EmailFailed("CONFIG_MISSING: Set SMTP_HOST/PORT/USER/PASSWORD and EMAIL_FROM.")

        try:
            server = self._connect()
        except smtplib.SMTPAuthenticationError as e:
            raise EmailFailed(f"AUTH_FAILED: {e}") from e
        except (smtplib.SMTPException, socket.timeout, OSError) as e:
            raise EmailFailed(f"NETWORK_ERROR: {e}") from e

        try:
            server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailFailed(f"SEND_FAILED: {e}") from e
        finally:
            try:
                server.quit()
            except (smtplib.SMTPException, OSError):
                logger.debug("SMTP quit failed; connection already closed")

    def send_risk_notification(self, email: str, patient_name: str, risk_level: str, prediction: bool):
        """Email the owner of a new patient record its result."""
        subject = f"Patient Prediction Results: {patient_name}"
        text = (
            f"Patient Name: {patient_name}\n"
            f"Risk Level: {risk_level}\n"
            f"Prediction: {'Diabetic' if prediction else 'Not Diabetic'}\n\n"
            f"Please review the results in your dashboard."
        )
        self.send(email, subject, text)


def get_mail_service() -> MailService:
    """Dependency building the mail service from settings."""
    return MailService(get_settings())
