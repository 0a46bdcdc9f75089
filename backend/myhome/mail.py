"""Outgoing account mails.

`DevMailService` only logs what would have been sent and is the default
(`MAIL_DEV_MODE=true`). `SmtpMailService` delivers plain-text messages
through the configured SMTP server.
"""

import logging
import smtplib
from email.message import EmailMessage

from . import models
from .config import settings

logger = logging.getLogger("myhome.mail")

SUBJECT_PASSWORD_RECOVER = "MyHome password recovery"
SUBJECT_PASSWORD_CHANGED = "MyHome password changed"
SUBJECT_ACCOUNT_CREATED = "Welcome to MyHome"
SUBJECT_ACCOUNT_CONFIRMED = "MyHome account confirmed"


def account_confirm_link(user: models.User, token: models.SecurityToken) -> str:
    return f"{settings.PUBLIC_BASE_URL}/users/{user.user_id}/email-confirm/{token.token}"


class DevMailService:
    def send_password_recover_code(self, user: models.User, recover_code: str) -> bool:
        logger.info("Password recover code sent to user with id=%s, code=%s", user.user_id, recover_code)
        return True

    def send_account_created(self, user: models.User, email_confirm_token: models.SecurityToken) -> bool:
        logger.info(
            "Account created message sent to user with id=%s, confirm link=%s",
            user.user_id,
            account_confirm_link(user, email_confirm_token),
        )
        return True

    def send_password_successfully_changed(self, user: models.User) -> bool:
        logger.info("Password successfully changed message sent to user with id=%s", user.user_id)
        return True

    def send_account_confirmed(self, user: models.User) -> bool:
        logger.info("Account confirmed message sent to user with id=%s", user.user_id)
        return True


class SmtpMailService:
    def __init__(self, host: str, port: int, username: str, password: str, use_tls: bool = True):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls

    def send_password_recover_code(self, user: models.User, recover_code: str) -> bool:
        body = f"Hello {user.name},\n\nyour password recovery code is: {recover_code}\n"
        return self._send(user.email, SUBJECT_PASSWORD_RECOVER, body)

    def send_account_created(self, user: models.User, email_confirm_token: models.SecurityToken) -> bool:
        link = account_confirm_link(user, email_confirm_token)
        body = f"Hello {user.name},\n\nplease confirm your email address by opening:\n{link}\n"
        return self._send(user.email, SUBJECT_ACCOUNT_CREATED, body)

    def send_password_successfully_changed(self, user: models.User) -> bool:
        body = f"Hello {user.name},\n\nyour password has been changed.\n"
        return self._send(user.email, SUBJECT_PASSWORD_CHANGED, body)

    def send_account_confirmed(self, user: models.User) -> bool:
        body = f"Hello {user.name},\n\nyour account is now confirmed.\n"
        return self._send(user.email, SUBJECT_ACCOUNT_CONFIRMED, body)

    def _send(self, to: str, subject: str, body: str) -> bool:
        message = EmailMessage()
        message["From"] = self.username
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError):
            logger.exception("Mail send error!")
            return False
        return True


def get_mail_service():
    """Return the mail service selected by `MAIL_DEV_MODE`."""
    if settings.MAIL_DEV_MODE:
        return DevMailService()
    return SmtpMailService(
        settings.MAIL_HOST,
        settings.MAIL_PORT,
        settings.MAIL_USERNAME,
        settings.MAIL_PASSWORD,
        settings.MAIL_USE_TLS,
    )
