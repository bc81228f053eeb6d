# brain_api/services/auth/passwords.py
from __future__ import annotations

import re

import bcrypt

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 20
PASSWORD_SPECIAL_CHARS = '!@#$%^&*(),.?":{}|<>'

_POLICY_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"[A-Z]"), "one uppercase letter"),
    (re.compile(r"[a-z]"), "one lowercase letter"),
    (re.compile(r"[0-9]"), "one number"),
    (re.compile("[" + re.escape(PASSWORD_SPECIAL_CHARS) + "]"), "one special character"),
)


def password_policy_violations(plaintext: str) -> list[str]:
    """
    List the password policy rules ``plaintext`` breaks.

    :param plaintext: Candidate password.
    :returns: Human-readable rule descriptions; empty when the password is acceptable.
    """
    problems: list[str] = []
    if not PASSWORD_MIN_LENGTH <= len(plaintext) <= PASSWORD_MAX_LENGTH:
        problems.append(f"{PASSWORD_MIN_LENGTH}-{PASSWORD_MAX_LENGTH} characters")
    for pattern, label in _POLICY_RULES:
        if not pattern.search(plaintext):
            problems.append(f"at least {label}")
    return problems


class PasswordHasher:
    """
    Salted, adaptive one-way hashing for login credentials (bcrypt).

    :param rounds: bcrypt cost factor. Raise it as hardware improves; stored
        hashes with a lower cost are upgraded on the next successful sign-in.
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds
        self._dummy_hash: bytes | None = None

    def hash(self, plaintext: str) -> str:
        """Return a salted bcrypt hash of ``plaintext``."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("ascii")

    def verify(self, plaintext: str, hashed: str | None) -> bool:
        """
        Constant-time check of ``plaintext`` against a stored hash.

        :returns: ``False`` for mismatches and for empty or malformed hashes.
        """
        if not hashed:
            return False
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("ascii"))
        except ValueError:
            return False

    def needs_rehash(self, hashed: str) -> bool:
        """Return ``True`` when ``hashed`` was produced with a lower cost factor."""
        # Modular crypt format: $2b$<cost>$<salt+digest>
        parts = hashed.split("$")
        if len(parts) < 4 or not parts[2].isdigit():
            return True
        return int(parts[2]) < self.rounds

    def dummy_verify(self, plaintext: str) -> bool:
        """
        Spend the same work as :meth:`verify` against a throwaway hash.

        Used when the account does not exist so both sign-in failure paths
        take comparable time. Always returns ``False``.
        """
        if self._dummy_hash is None:
            self._dummy_hash = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(self.rounds))
        try:
            bcrypt.checkpw(plaintext.encode("utf-8"), self._dummy_hash)
        except ValueError:
            pass
        return False
