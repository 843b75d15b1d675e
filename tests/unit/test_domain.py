"""Tests for domain entities and value objects."""

from datetime import UTC, datetime

import pytest

from app.domain.entities import TwoFactorCredentialEntity
from app.domain.enums import TwoFactorState
from app.domain.exceptions import TwoFactorStateException
from app.domain.value_objects import EmailAddress, QuoteFingerprint, normalize_phone

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


class TestTwoFactorCredential:
    def test_lifecycle(self) -> None:
        credential = TwoFactorCredentialEntity(admin_id="a1")
        assert credential.state is TwoFactorState.ABSENT

        credential.begin_setup("cipher-1")
        assert credential.state is TwoFactorState.PENDING_SETUP
        assert not credential.gates_login

        credential.begin_setup("cipher-2")
        assert credential.encrypted_secret == "cipher-2"

        credential.confirm(NOW)
        assert credential.state is TwoFactorState.ENABLED
        assert credential.gates_login

        credential.clear()
        assert credential.state is TwoFactorState.ABSENT

    def test_enabled_without_confirmation_does_not_gate(self) -> None:
        credential = TwoFactorCredentialEntity(admin_id="a1", encrypted_secret="c", enabled=True)
        assert credential.state is TwoFactorState.PENDING_SETUP
        assert not credential.gates_login

    def test_invalid_transitions(self) -> None:
        credential = TwoFactorCredentialEntity(admin_id="a1")
        with pytest.raises(TwoFactorStateException):
            credential.confirm(NOW)
        with pytest.raises(TwoFactorStateException):
            credential.require_enabled()

        credential.begin_setup("c")
        credential.confirm(NOW)
        with pytest.raises(TwoFactorStateException):
            credential.begin_setup("c2")
        with pytest.raises(TwoFactorStateException):
            credential.confirm(NOW)


class TestEmailAddress:
    def test_normalized(self) -> None:
        assert EmailAddress("  Jane.Doe@Example.COM ").value == "jane.doe@example.com"

    @pytest.mark.parametrize("raw", ["", "   ", "jane", "jane@", "jane@example", "a b@example.com"])
    def test_invalid(self, raw: str) -> None:
        with pytest.raises(ValueError):
            EmailAddress(raw)

    def test_masked(self) -> None:
        assert EmailAddress("jane@example.com").masked() == "j***@example.com"


class TestQuoteFingerprint:
    def test_phone_normalization(self) -> None:
        assert normalize_phone(" +1 (555) 010-0100 ") == "+15550100100"
        assert normalize_phone(None) == ""

    def test_equivalent_contacts_collide(self) -> None:
        a = QuoteFingerprint.from_contact("Jane@Example.com", "555-1111")
        b = QuoteFingerprint.from_contact("jane@example.com ", "555 1111")
        assert a.digest == b.digest
        assert a.email_digest == b.email_digest

    def test_different_phone_same_email(self) -> None:
        a = QuoteFingerprint.from_contact("jane@example.com", "555-1111")
        b = QuoteFingerprint.from_contact("jane@example.com", "555-2222")
        assert a.digest != b.digest
        assert a.email_digest == b.email_digest

    def test_digest_hides_contact(self) -> None:
        digest = QuoteFingerprint.from_contact("jane@example.com", "555-1111").digest
        assert "jane" not in digest and len(digest) == 64
