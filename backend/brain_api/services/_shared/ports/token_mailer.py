from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class MailPurpose(str, Enum):
    PASSWORD_RESET = "password_reset"
    EMAIL_VERIFICATION = "email_verification"


class TokenMailer(Protocol):
    """
    Delivery channel for one-time tokens (password reset, e-mail verification).

    Implementations receive the **raw** token; it must never be persisted or
    logged by them.
    """

    def send(self, *, purpose: MailPurpose, email: str, token: str) -> None: ...


class LoggingTokenMailer(TokenMailer):
    """Development mailer: records that a message would be sent, minus the token."""

    def send(self, *, purpose: MailPurpose, email: str, token: str) -> None:
        logger.info(
            "one-time token delivery requested",
            extra={"event": f"mail.{purpose.value}"},
        )


class RecordingTokenMailer(TokenMailer):
    """Keeps every delivery in memory so callers can read the raw tokens back."""

    def __init__(self) -> None:
        self.sent: list[tuple[MailPurpose, str, str]] = []

    def send(self, *, purpose: MailPurpose, email: str, token: str) -> None:
        self.sent.append((purpose, email, token))

    def last_token(self, purpose: MailPurpose) -> str | None:
        for sent_purpose, _email, token in reversed(self.sent):
            if sent_purpose is purpose:
                return token
        return None
