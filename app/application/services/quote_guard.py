"""Anti-abuse gate for the public quote endpoint.

Cheap checks (honeypot, timing, field whitelist) run first, then the optional
CAPTCHA verification; last, the duplicate window and the per-email rolling
daily cap are claimed in the shared counter store. Callers only ever see a
generic rejection; the rule that fired is written to the security log.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from app.application.dtos.auth import ClientContext
from app.application.dtos.quote import QuoteSubmission
from app.application.interfaces.services import ICaptchaVerifier, ICounterStore
from app.core.constants import QUOTE_DAILY_WINDOW_SECONDS
from app.domain.exceptions import (
    QuoteLimitExceededException,
    QuoteRejectedException,
    StoreUnavailableException,
)
from app.domain.value_objects import QuoteFingerprint
from app.infrastructure.cache.keys import quote_daily_key, quote_dedup_key
from app.shared.enums import QuoteRejectionRule, SecurityEvent
from app.shared.telemetry.logging import get_logger, log_security_event
from app.shared.utils.generators import generate_cuid
from app.shared.utils.masking import mask_email, mask_ip

logger = get_logger(__name__)

# Digit strings longer than this are not epoch milliseconds.
_MAX_TIMESTAMP_CHARS = 20


def _is_filled(value: Any) -> bool:
    """Any non-empty honeypot value is conclusive; whitespace-only strings count as empty."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict)):
        return bool(value)
    return True


def _epoch_ms(value: Any) -> int | None:
    """Form start time in epoch milliseconds, or None when absent or unparseable."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if len(text) <= _MAX_TIMESTAMP_CHARS and text.lstrip("-").isdigit():
            return int(text)
    return None


@dataclass(frozen=True)
class QuoteGuardConfig:
    min_fill_ms: int = 1500
    max_form_age_minutes: int = 60
    dedup_window_minutes: int = 10
    max_per_email_per_day: int = 5
    fail_open: bool = False


@dataclass(frozen=True)
class QuoteAdmission:
    """Counter claims taken for an accepted submission; passed to release() to undo them."""

    dedup_key: str | None = None
    daily_key: str | None = None
    member: str | None = None


class QuoteAntiAbuseGate:
    """Decide whether a quote submission may be persisted."""

    def __init__(
        self,
        store: ICounterStore,
        config: QuoteGuardConfig | None = None,
        clock: Callable[[], float] = time.time,
        captcha: ICaptchaVerifier | None = None,
    ) -> None:
        self.store = store
        self.config = config or QuoteGuardConfig()
        self.clock = clock
        self.captcha = captcha

    def _reject(
        self,
        rule: QuoteRejectionRule,
        submission: QuoteSubmission,
        client: ClientContext | None,
        **fields,
    ) -> QuoteRejectedException:
        log_security_event(
            SecurityEvent.QUOTE_REJECTED.value,
            level=logging.WARNING,
            rule=rule.value,
            email=mask_email(submission.email),
            ip=mask_ip(client.ip_address) if client else None,
            user_agent=client.user_agent if client else None,
            **fields,
        )
        if rule in (QuoteRejectionRule.DUPLICATE, QuoteRejectionRule.DAILY_CAP):
            return QuoteLimitExceededException(rule.value)
        return QuoteRejectedException(rule.value)

    def check_static(
        self,
        submission: QuoteSubmission,
        unknown_fields: Iterable[str] = (),
        client: ClientContext | None = None,
    ) -> None:
        """Honeypot, timing and whitelist checks. No store access.

        Raises:
            QuoteRejectedException: With the rule that fired (never shown to the caller).
        """
        if _is_filled(submission.honeypot):
            raise self._reject(QuoteRejectionRule.HONEYPOT, submission, client)

        started = _epoch_ms(submission.form_started_at_ms)
        if started is None:
            raise self._reject(QuoteRejectionRule.MISSING_TIMESTAMP, submission, client)
        elapsed_ms = int(self.clock() * 1000) - started
        if elapsed_ms < self.config.min_fill_ms:
            raise self._reject(
                QuoteRejectionRule.TOO_FAST, submission, client, elapsed_ms=elapsed_ms
            )
        if elapsed_ms > self.config.max_form_age_minutes * 60 * 1000:
            raise self._reject(
                QuoteRejectionRule.STALE, submission, client, elapsed_ms=elapsed_ms
            )

        extra = sorted(unknown_fields)
        if extra:
            raise self._reject(
                QuoteRejectionRule.UNKNOWN_FIELDS,
                submission,
                client,
                fields=",".join(extra[:10]),
            )

    async def check_captcha(
        self, submission: QuoteSubmission, client: ClientContext | None = None
    ) -> None:
        """Verify the CAPTCHA token with the provider. No-op when no verifier is configured.

        Raises:
            QuoteRejectedException: Token missing or refused by the provider.
            StoreUnavailableException: Provider unreachable and fail_open is off.
        """
        if self.captcha is None:
            return
        token = submission.captcha_token
        if not isinstance(token, str) or not token.strip():
            raise self._reject(QuoteRejectionRule.CAPTCHA_MISSING, submission, client)
        try:
            verified = await self.captcha.verify(
                token.strip(), client.ip_address if client else None
            )
        except StoreUnavailableException:
            if not self.config.fail_open:
                raise
            logger.warning("Captcha provider unavailable; skipping verification (fail open)")
            return
        if not verified:
            raise self._reject(QuoteRejectionRule.CAPTCHA_FAILED, submission, client)

    async def _claim_counters(
        self, submission: QuoteSubmission, client: ClientContext | None
    ) -> QuoteAdmission:
        fingerprint = QuoteFingerprint.from_contact(submission.email, submission.phone)
        dedup_key = quote_dedup_key(fingerprint.digest)
        daily_key = quote_daily_key(fingerprint.email_digest)
        member = generate_cuid()

        if not await self.store.claim(dedup_key, self.config.dedup_window_minutes * 60):
            raise self._reject(QuoteRejectionRule.DUPLICATE, submission, client)
        try:
            within_cap = await self.store.add_within_limit(
                daily_key,
                member,
                QUOTE_DAILY_WINDOW_SECONDS,
                self.config.max_per_email_per_day,
            )
        except StoreUnavailableException:
            await self._release_quietly(dedup_key)
            raise
        if not within_cap:
            await self.store.release(dedup_key)
            raise self._reject(QuoteRejectionRule.DAILY_CAP, submission, client)
        return QuoteAdmission(dedup_key=dedup_key, daily_key=daily_key, member=member)

    async def _release_quietly(self, dedup_key: str) -> None:
        try:
            await self.store.release(dedup_key)
        except StoreUnavailableException:
            logger.warning("Could not release dedup claim after counter store failure")

    async def admit(
        self,
        submission: QuoteSubmission,
        unknown_fields: Iterable[str] = (),
        client: ClientContext | None = None,
    ) -> QuoteAdmission:
        """Run every check and claim the counters for an accepted submission.

        The duplicate-window claim and the daily-cap add are each atomic in the
        store, so two concurrent submissions at the cap cannot both pass.

        Raises:
            QuoteRejectedException: Honeypot, timing, whitelist or CAPTCHA rule fired.
            QuoteLimitExceededException: Duplicate window or daily cap.
            StoreUnavailableException: Counter store or CAPTCHA provider unreachable
                and fail_open is off.
        """
        self.check_static(submission, unknown_fields, client)
        await self.check_captcha(submission, client)
        try:
            return await self._claim_counters(submission, client)
        except StoreUnavailableException:
            if not self.config.fail_open:
                raise
            logger.warning("Counter store unavailable; admitting quote without limits (fail open)")
            return QuoteAdmission()

    async def release(self, admission: QuoteAdmission) -> None:
        """Undo the counter claims of an admission whose submission was not persisted."""
        if admission.dedup_key:
            await self.store.release(admission.dedup_key)
        if admission.daily_key and admission.member:
            await self.store.remove_member(admission.daily_key, admission.member)
