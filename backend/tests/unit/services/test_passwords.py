"""Unit tests for the bcrypt password hasher and the password policy."""

from __future__ import annotations

import bcrypt
import pytest

from brain_api.services.auth.passwords import PasswordHasher, password_policy_violations


@pytest.fixture()
def fast_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


class TestPasswordHasher:
    def test_hash_round_trip(self, fast_hasher):
        """``verify(P, hash(P))`` holds and ``verify(P', hash(P))`` does not."""
        hashed = fast_hasher.hash("Aa1!aaaa")

        assert hashed != "Aa1!aaaa"
        assert fast_hasher.verify("Aa1!aaaa", hashed) is True
        assert fast_hasher.verify("Aa1!aaab", hashed) is False

    def test_hash_is_salted(self, fast_hasher):
        assert fast_hasher.hash("same-Pass1!") != fast_hasher.hash("same-Pass1!")

    @pytest.mark.parametrize("stored", ["", None, "not-a-bcrypt-hash"])
    def test_verify_rejects_empty_or_malformed_hash(self, fast_hasher, stored):
        assert fast_hasher.verify("Aa1!aaaa", stored) is False

    def test_needs_rehash_only_when_cost_is_lower(self):
        low = PasswordHasher(rounds=4).hash("Aa1!aaaa")
        high = PasswordHasher(rounds=5)

        assert high.needs_rehash(low) is True
        assert PasswordHasher(rounds=4).needs_rehash(low) is False
        # Never downgrade.
        assert PasswordHasher(rounds=4).needs_rehash(high.hash("Aa1!aaaa")) is False

    def test_needs_rehash_for_unparseable_hash(self, fast_hasher):
        assert fast_hasher.needs_rehash("garbage") is True

    def test_hash_uses_configured_cost(self, fast_hasher):
        hashed = fast_hasher.hash("Aa1!aaaa")
        assert hashed.split("$")[2] == "04"
        assert bcrypt.checkpw(b"Aa1!aaaa", hashed.encode())

    def test_dummy_verify_is_always_false(self, fast_hasher):
        assert fast_hasher.dummy_verify("not-a-real-password") is False
        assert fast_hasher.dummy_verify("anything") is False

    def test_overlong_passwords_are_rejected_not_raised(self, fast_hasher):
        """bcrypt refuses input over 72 bytes; both checks must still answer ``False``."""
        overlong = "A" * 100
        hashed = fast_hasher.hash("Aa1!aaaa")

        assert fast_hasher.verify(overlong, hashed) is False
        assert fast_hasher.dummy_verify(overlong) is False


class TestPasswordPolicy:
    def test_accepts_compliant_password(self):
        assert password_policy_violations("Aa1!aaaa") == []

    @pytest.mark.parametrize(
        ("candidate", "expected"),
        [
            ("Aa1!aaa", "8-20 characters"),
            ("Aa1!" + "a" * 17, "8-20 characters"),
            ("aa1!aaaa", "at least one uppercase letter"),
            ("AA1!AAAA", "at least one lowercase letter"),
            ("Aaa!aaaa", "at least one number"),
            ("Aa1aaaaa", "at least one special character"),
        ],
    )
    def test_reports_each_broken_rule(self, candidate, expected):
        assert expected in password_policy_violations(candidate)

    def test_reports_every_rule_for_empty_password(self):
        assert len(password_policy_violations("")) == 5
