"""
Email delivery over SMTP.

When SMTP credentials are not configured the message is logged instead of
sent, which keeps the OTP flow usable in local development.
"""

import smtplib
from email.mime.text import MIMEText

from config import settings
from logging_config import logger


class EmailService:
    """SMTP email sender"""

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_name = settings.EMAIL_FROM_NAME

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp_user and self.smtp_password)

    def send_email(self, to_email: str, subject: str, text: str) -> None:
        """Send a plain text email. Raises on SMTP failure."""
        if not self.is_configured:
            logger.warning(f"[Email] SMTP not configured, not sending '{subject}' to {to_email}: {text}")
            return

        msg = MIMEText(text)
        msg["Subject"] = subject
        msg["From"] = f'"{self.from_name}" <{self.smtp_user}>'
        msg["To"] = to_email

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"[Email] Failed to send email to {to_email}: {e}")
            raise

        logger.info(f"[Email] Sent '{subject}' to {to_email}")


email_service = EmailService()
