"""Tests for TwoFactorService: setup state machine, backup codes, disable."""

import re
from datetime import timedelta

import pytest

from app.domain.exceptions import AuthenticationException, TwoFactorStateException
from app.shared.enums import AuditAction
from tests.conftest import TEST_PASSWORD

BACKUP_CODE_RE = re.compile(r"^[0-9A-F]{4}-[0-9A-F]{4}-[0-9A-F]{4}$")


@pytest.fixture
def admin(fakes, password_hash):
    return fakes.admins.add("ops@example.com", password_hash)


class TestSetup:
    async def test_begin_setup_stores_encrypted_secret_pending(
        self, services, fakes, admin, encryptor
    ) -> None:
        setup = await services.two_factor.begin_setup(admin.id)
        stored = fakes.admins.records[admin.id]
        assert stored.two_factor_enabled is False
        assert stored.two_factor_secret != setup.secret
        assert encryptor.decrypt(stored.two_factor_secret) == setup.secret
        assert setup.otpauth_url.startswith("otpauth://totp/")
        assert "Test%20Supplier" in setup.otpauth_url
        assert setup.qr_code_data_uri.startswith("data:image/png;base64,")
        status = await services.two_factor.get_status(admin.id)
        assert status.state == "pending_setup"
        assert status.enabled is False

    async def test_pending_setup_does_not_gate_login(self, services, admin) -> None:
        await services.two_factor.begin_setup(admin.id)
        result = await services.auth.login("ops@example.com", TEST_PASSWORD)
        assert result.two_factor_required is False
        assert result.tokens is not None

    async def test_reinitiating_replaces_unconfirmed_secret(self, services, admin) -> None:
        first = await services.two_factor.begin_setup(admin.id)
        second = await services.two_factor.begin_setup(admin.id)
        assert first.secret != second.secret

    async def test_confirm_without_setup_is_state_error(self, services, admin) -> None:
        with pytest.raises(TwoFactorStateException):
            await services.two_factor.confirm_setup(admin.id, "123456")

    async def test_wrong_code_keeps_pending(self, services, fakes, admin, totp, clock) -> None:
        setup = await services.two_factor.begin_setup(admin.id)
        stale_code = totp.now_code(setup.secret, clock() - timedelta(minutes=5))
        with pytest.raises(AuthenticationException, match="Invalid verification code"):
            await services.two_factor.confirm_setup(admin.id, stale_code)
        assert (await services.two_factor.get_status(admin.id)).state == "pending_setup"
        assert AuditAction.TWO_FACTOR_ENABLE.value in fakes.audit.actions(success=False)

    async def test_confirm_enables_and_returns_unique_backup_codes(
        self, services, fakes, admin, totp, clock
    ) -> None:
        setup = await services.two_factor.begin_setup(admin.id)
        result = await services.two_factor.confirm_setup(
            admin.id, totp.now_code(setup.secret, clock())
        )
        assert len(result.codes) == 10
        assert len(set(result.codes)) == 10
        assert all(BACKUP_CODE_RE.match(c) for c in result.codes)
        stored = fakes.admins.records[admin.id]
        assert stored.two_factor_enabled is True
        assert stored.two_factor_confirmed_at == clock()
        assert not any(c in fakes.backup_codes.codes[admin.id] for c in result.codes)
        status = await services.two_factor.get_status(admin.id)
        assert status.state == "enabled"
        assert status.backup_codes_remaining == 10

    async def test_setup_again_while_enabled_is_state_error(
        self, services, admin, totp, clock
    ) -> None:
        setup = await services.two_factor.begin_setup(admin.id)
        await services.two_factor.confirm_setup(admin.id, totp.now_code(setup.secret, clock()))
        with pytest.raises(TwoFactorStateException):
            await services.two_factor.begin_setup(admin.id)
        with pytest.raises(TwoFactorStateException):
            await services.two_factor.confirm_setup(admin.id, "123456")


@pytest.fixture
async def enabled(services, admin, totp, clock):
    setup = await services.two_factor.begin_setup(admin.id)
    backup = await services.two_factor.confirm_setup(
        admin.id, totp.now_code(setup.secret, clock())
    )
    return setup.secret, backup.codes


class TestVerifyAndDisable:
    async def test_adjacent_step_accepted_two_steps_rejected(
        self, services, fakes, admin, enabled, totp, clock
    ) -> None:
        secret, _ = enabled
        clock.advance(minutes=10)
        record = fakes.admins.records[admin.id]
        two_back = totp.now_code(secret, clock() - timedelta(seconds=60))
        assert await services.two_factor.verify_for_login(record, two_back) is None
        one_back = totp.now_code(secret, clock() - timedelta(seconds=30))
        assert await services.two_factor.verify_for_login(record, one_back) == "totp"

    async def test_backup_codes_are_single_use(self, services, fakes, admin, enabled) -> None:
        _, codes = enabled
        record = fakes.admins.records[admin.id]
        assert await services.two_factor.verify_for_login(record, codes[3]) == "backup_code"
        assert await services.two_factor.verify_for_login(record, codes[3]) is None
        assert (await services.two_factor.get_status(admin.id)).backup_codes_remaining == 9

    async def test_regenerate_invalidates_previous_codes(
        self, services, fakes, admin, enabled
    ) -> None:
        _, old_codes = enabled
        new = await services.two_factor.regenerate_backup_codes(admin.id)
        record = fakes.admins.records[admin.id]
        assert await services.two_factor.verify_for_login(record, old_codes[0]) is None
        assert await services.two_factor.verify_for_login(record, new.codes[0]) == "backup_code"

    async def test_regenerate_requires_enabled(self, services, admin) -> None:
        with pytest.raises(TwoFactorStateException):
            await services.two_factor.regenerate_backup_codes(admin.id)

    async def test_disable_with_wrong_code_keeps_enabled(
        self, services, admin, enabled
    ) -> None:
        with pytest.raises(AuthenticationException):
            await services.two_factor.disable(admin.id, "0000-0000-0000")
        assert (await services.two_factor.get_status(admin.id)).enabled is True

    async def test_disable_with_backup_code_clears_everything(
        self, services, fakes, admin, enabled
    ) -> None:
        _, codes = enabled
        await services.two_factor.disable(admin.id, codes[0])
        stored = fakes.admins.records[admin.id]
        assert stored.two_factor_secret is None
        assert stored.two_factor_enabled is False
        assert stored.two_factor_confirmed_at is None
        assert admin.id not in fakes.backup_codes.codes
        assert (await services.two_factor.get_status(admin.id)).state == "absent"
        result = await services.auth.login("ops@example.com", TEST_PASSWORD)
        assert result.two_factor_required is False

    async def test_disable_when_absent_is_state_error(self, services, admin) -> None:
        with pytest.raises(TwoFactorStateException):
            await services.two_factor.disable(admin.id, "123456")
