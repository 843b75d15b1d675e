"""Tests for the quote anti-abuse gate against the in-memory counter store."""

import asyncio

import pytest

from app.application.dtos.auth import ClientContext
from app.application.dtos.quote import QuoteSubmission
from app.application.services import QuoteAntiAbuseGate, QuoteGuardConfig
from app.domain.exceptions import (
    QuoteLimitExceededException,
    QuoteRejectedException,
    StoreUnavailableException,
)
from app.domain.value_objects import QuoteFingerprint
from app.infrastructure.cache import InMemoryCounterStore, quote_dedup_key
from tests.fakes import EpochClock, FakeCaptchaVerifier, UnavailableCounterStore

HOUR = 60 * 60


@pytest.fixture
def epoch() -> EpochClock:
    return EpochClock()


@pytest.fixture
def store(epoch: EpochClock) -> InMemoryCounterStore:
    return InMemoryCounterStore(clock=epoch)


@pytest.fixture
def gate(store: InMemoryCounterStore, epoch: EpochClock) -> QuoteAntiAbuseGate:
    return QuoteAntiAbuseGate(store, QuoteGuardConfig(), clock=epoch)


def submission(epoch: EpochClock, *, elapsed_ms: int | None = 5000, **overrides) -> QuoteSubmission:
    fields = {
        "name": "Jane Buyer",
        "email": "jane@example.com",
        "phone": "+1 555 0100",
        "honeypot": "",
        "form_started_at_ms": None if elapsed_ms is None else epoch.now_ms - elapsed_ms,
    }
    fields.update(overrides)
    return QuoteSubmission(**fields)


async def _rule(gate: QuoteAntiAbuseGate, sub: QuoteSubmission, unknown=()) -> str:
    with pytest.raises(QuoteRejectedException) as exc_info:
        await gate.admit(sub, unknown)
    return exc_info.value.rule


class TestStaticChecks:
    async def test_clean_submission_admitted(self, gate, epoch) -> None:
        admission = await gate.admit(submission(epoch))
        assert admission.dedup_key and admission.daily_key and admission.member

    async def test_filled_honeypot(self, gate, epoch) -> None:
        assert await _rule(gate, submission(epoch, honeypot="http://spam.example")) == "honeypot"

    async def test_whitespace_honeypot_is_empty(self, gate, epoch) -> None:
        await gate.admit(submission(epoch, honeypot="   "))

    async def test_missing_timestamp(self, gate, epoch) -> None:
        assert await _rule(gate, submission(epoch, elapsed_ms=None)) == "missing_timestamp"

    @pytest.mark.parametrize("elapsed_ms", [0, 1000, 1499, -30_000])
    async def test_submitted_too_fast(self, gate, epoch, elapsed_ms) -> None:
        assert await _rule(gate, submission(epoch, elapsed_ms=elapsed_ms)) == "too_fast"

    async def test_minimum_fill_time_is_inclusive(self, gate, epoch) -> None:
        await gate.admit(submission(epoch, elapsed_ms=1500))

    async def test_stale_form(self, gate, epoch) -> None:
        assert await _rule(gate, submission(epoch, elapsed_ms=61 * 60 * 1000)) == "stale"

    async def test_unknown_fields(self, gate, epoch) -> None:
        rule = await _rule(gate, submission(epoch), unknown=["role", "isAdmin"])
        assert rule == "unknown_fields"

    @pytest.mark.parametrize("value", ["x" * 5000, 1, 0, True, ["bot"], {"a": 1}])
    async def test_any_non_empty_honeypot(self, gate, epoch, value) -> None:
        assert await _rule(gate, submission(epoch, honeypot=value)) == "honeypot"

    @pytest.mark.parametrize("value", [None, "", []])
    async def test_empty_honeypot_values(self, gate, epoch, value) -> None:
        await gate.admit(submission(epoch, honeypot=value))

    @pytest.mark.parametrize(
        "value", ["soon", "", "12ab", "9" * 5000, True, float("inf"), {"ms": 1}, ["1"]]
    )
    async def test_unparseable_timestamp_is_missing(self, gate, epoch, value) -> None:
        sub = submission(epoch, form_started_at_ms=value)
        assert await _rule(gate, sub) == "missing_timestamp"

    async def test_timestamp_as_digit_string_or_float(self, gate, epoch) -> None:
        await gate.admit(submission(epoch, form_started_at_ms=str(epoch.now_ms - 5000)))
        await gate.admit(
            submission(epoch, email="b@example.com", form_started_at_ms=float(epoch.now_ms - 5000))
        )

    async def test_static_rejection_is_not_rate_limit(self, gate, epoch) -> None:
        with pytest.raises(QuoteRejectedException) as exc_info:
            await gate.admit(submission(epoch, honeypot="x"))
        assert not isinstance(exc_info.value, QuoteLimitExceededException)
        assert exc_info.value.message == "Invalid request"

    async def test_static_rejection_touches_no_counters(self, gate, store, epoch) -> None:
        await _rule(gate, submission(epoch, honeypot="x"))
        await gate.admit(submission(epoch))


class TestDuplicateWindow:
    async def test_same_contact_within_window_rejected(self, gate, epoch) -> None:
        await gate.admit(submission(epoch))
        epoch.advance(9 * 60)
        with pytest.raises(QuoteLimitExceededException) as exc_info:
            await gate.admit(submission(epoch))
        assert exc_info.value.rule == "duplicate"
        assert exc_info.value.message == "Too many requests"

    async def test_same_contact_after_window_admitted(self, gate, epoch) -> None:
        await gate.admit(submission(epoch))
        epoch.advance(10 * 60 + 1)
        await gate.admit(submission(epoch))

    async def test_contact_is_normalized(self, gate, epoch) -> None:
        await gate.admit(submission(epoch, email="Jane@Example.COM", phone="+1-555-0100"))
        assert await _rule(gate, submission(epoch)) == "duplicate"

    async def test_different_phone_is_not_duplicate(self, gate, epoch) -> None:
        await gate.admit(submission(epoch))
        await gate.admit(submission(epoch, phone="+1 555 0199"))


class TestDailyCap:
    async def _fill(self, gate, epoch, count: int = 5) -> None:
        for i in range(count):
            await gate.admit(submission(epoch, phone=f"+1 555 01{i:02d}"))

    async def test_sixth_submission_in_a_day_rejected(self, gate, epoch) -> None:
        await self._fill(gate, epoch)
        with pytest.raises(QuoteLimitExceededException) as exc_info:
            await gate.admit(submission(epoch, phone="+1 555 0999"))
        assert exc_info.value.rule == "daily_cap"

    async def test_cap_is_per_email(self, gate, epoch) -> None:
        await self._fill(gate, epoch)
        await gate.admit(submission(epoch, email="other@example.com"))

    async def test_window_rolls(self, gate, epoch) -> None:
        await self._fill(gate, epoch)
        epoch.advance(24 * HOUR + 1)
        await gate.admit(submission(epoch, phone="+1 555 0999"))

    async def test_cap_rejection_releases_duplicate_claim(self, gate, store, epoch) -> None:
        await self._fill(gate, epoch)
        blocked = submission(epoch, phone="+1 555 0999")
        await _rule(gate, blocked)
        fingerprint = QuoteFingerprint.from_contact(blocked.email, blocked.phone)
        assert await store.claim(quote_dedup_key(fingerprint.digest), 60) is True

    async def test_concurrent_submissions_at_cap_admit_exactly_one(self, gate, epoch) -> None:
        await self._fill(gate, epoch, count=4)
        results = await asyncio.gather(
            *(gate.admit(submission(epoch, phone=f"+1 555 09{i:02d}")) for i in range(5)),
            return_exceptions=True,
        )
        admitted = [r for r in results if not isinstance(r, Exception)]
        limited = [r for r in results if isinstance(r, QuoteLimitExceededException)]
        assert len(admitted) == 1
        assert len(limited) == 4


class TestRelease:
    async def test_release_undoes_both_claims(self, gate, epoch) -> None:
        await self._admit_four(gate, epoch)
        admission = await gate.admit(submission(epoch))
        await gate.release(admission)
        await gate.admit(submission(epoch))

    async def _admit_four(self, gate, epoch) -> None:
        for i in range(4):
            await gate.admit(submission(epoch, phone=f"+1 555 07{i:02d}"))


class TestStoreUnavailable:
    async def test_fails_closed_by_default(self, epoch) -> None:
        gate = QuoteAntiAbuseGate(UnavailableCounterStore(), clock=epoch)
        with pytest.raises(StoreUnavailableException):
            await gate.admit(submission(epoch))

    async def test_fail_open_admits_without_claims(self, epoch) -> None:
        gate = QuoteAntiAbuseGate(
            UnavailableCounterStore(), QuoteGuardConfig(fail_open=True), clock=epoch
        )
        admission = await gate.admit(submission(epoch))
        assert admission.dedup_key is None
        await gate.release(admission)

    async def test_static_checks_still_apply_when_store_is_down(self, epoch) -> None:
        gate = QuoteAntiAbuseGate(
            UnavailableCounterStore(), QuoteGuardConfig(fail_open=True), clock=epoch
        )
        assert await _rule(gate, submission(epoch, honeypot="x")) == "honeypot"


class TestCaptcha:
    @pytest.fixture
    def captcha(self) -> FakeCaptchaVerifier:
        return FakeCaptchaVerifier()

    @pytest.fixture
    def gate(self, store, epoch, captcha) -> QuoteAntiAbuseGate:
        return QuoteAntiAbuseGate(store, QuoteGuardConfig(), clock=epoch, captcha=captcha)

    async def test_verified_token_admitted(self, gate, epoch, captcha) -> None:
        client = ClientContext(ip_address="198.51.100.7", user_agent=None)
        await gate.admit(submission(epoch, captcha_token=" captcha-ok "), client=client)
        assert captcha.calls == [("captcha-ok", "198.51.100.7")]

    @pytest.mark.parametrize("token", [None, "  ", 7])
    async def test_missing_token(self, gate, epoch, captcha, token) -> None:
        assert await _rule(gate, submission(epoch, captcha_token=token)) == "captcha_missing"
        assert captcha.calls == []

    async def test_refused_token(self, gate, epoch) -> None:
        assert await _rule(gate, submission(epoch, captcha_token="forged")) == "captcha_failed"

    async def test_static_checks_run_before_provider_call(self, gate, epoch, captcha) -> None:
        sub = submission(epoch, honeypot="x", captcha_token="captcha-ok")
        assert await _rule(gate, sub) == "honeypot"
        assert captcha.calls == []

    async def test_refused_token_claims_no_counters(self, gate, store, epoch) -> None:
        sub = submission(epoch, captcha_token="forged")
        await _rule(gate, sub)
        fingerprint = QuoteFingerprint.from_contact(sub.email, sub.phone)
        assert await store.claim(quote_dedup_key(fingerprint.digest), 60) is True

    async def test_provider_outage_fails_closed(self, gate, epoch, captcha) -> None:
        captcha.unavailable = True
        with pytest.raises(StoreUnavailableException):
            await gate.admit(submission(epoch, captcha_token="captcha-ok"))

    async def test_provider_outage_with_fail_open_still_applies_limits(
        self, store, epoch
    ) -> None:
        gate = QuoteAntiAbuseGate(
            store,
            QuoteGuardConfig(fail_open=True),
            clock=epoch,
            captcha=FakeCaptchaVerifier(unavailable=True),
        )
        admission = await gate.admit(submission(epoch, captcha_token="captcha-ok"))
        assert admission.dedup_key is not None
        assert await _rule(gate, submission(epoch, captcha_token="captcha-ok")) == "duplicate"
