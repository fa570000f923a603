"""Unit tests for PasswordService."""

import pytest

from groov.services.password_service import PasswordService


@pytest.fixture
def passwords():
    """Cheap work factor keeps the suite fast."""
    return PasswordService(rounds=4)


class TestHash:
    """Tests for PasswordService.hash."""

    def test_returns_bcrypt_string(self, passwords):
        hashed = passwords.hash("secret1")
        assert hashed.startswith("$2b$04$")
        assert len(hashed) == 60

    def test_hash_is_never_the_plaintext(self, passwords):
        assert passwords.hash("secret1") != "secret1"

    def test_different_salts(self, passwords):
        h1 = passwords.hash("same-password")
        h2 = passwords.hash("same-password")
        assert h1 != h2, "Each call should produce a unique salt"

    def test_uses_configured_rounds(self):
        assert PasswordService(rounds=5).hash("pw").startswith("$2b$05$")

    def test_rejects_password_over_72_bytes(self, passwords):
        with pytest.raises(ValueError, match="72"):
            passwords.hash("x" * 73)


class TestVerify:
    """Tests for PasswordService.verify."""

    @pytest.mark.parametrize("password", ["secret1", "pässwörd", " spaced out "])
    def test_matches_own_hash(self, passwords, password):
        assert passwords.verify(password, passwords.hash(password)) is True

    def test_rejects_other_password(self, passwords):
        hashed = passwords.hash("right-password")
        assert passwords.verify("wrong-password", hashed) is False

    def test_malformed_hash_is_false(self, passwords):
        assert passwords.verify("anything", "not-a-bcrypt-hash") is False

    def test_verify_dummy_is_always_false(self, passwords):
        assert passwords.verify_dummy("groov-dummy-password") is False
