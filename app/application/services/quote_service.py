"""Quote intake: gate, sanitize, persist, then notify staff without blocking the response."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from app.application.dtos.audit_log import audit_entry
from app.application.dtos.auth import ClientContext
from app.application.dtos.quote import QuoteCreate, QuoteResult, QuoteSubmission
from app.application.interfaces.repositories import IQuoteRepository
from app.application.interfaces.services import IAuditSink, IQuoteNotifier
from app.application.services.quote_guard import QuoteAntiAbuseGate
from app.domain.value_objects import EmailAddress
from app.shared.enums import ActorType, AuditAction, SecurityEvent
from app.shared.telemetry.logging import get_logger, log_security_event
from app.shared.telemetry.tracing import add_span_attributes, traced
from app.shared.utils.generators import generate_quote_reference
from app.shared.utils.sanitization import InputSanitizer

logger = get_logger(__name__)


class QuoteNotificationDispatcher:
    """Runs notifications as background tasks; failures go to the audit and security logs.

    One instance lives for the whole application so pending tasks can be
    awaited on shutdown.
    """

    def __init__(self, notifier: IQuoteNotifier, audit_sink: IAuditSink) -> None:
        self.notifier = notifier
        self.audit_sink = audit_sink
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, quote: QuoteResult) -> asyncio.Task[None]:
        task = asyncio.create_task(self._deliver(quote), name=f"quote-notify-{quote.reference}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _deliver(self, quote: QuoteResult) -> None:
        try:
            await self.notifier.notify_quote_received(quote)
        except asyncio.CancelledError:
            raise
        except Exception as e:  # any delivery failure is recorded, never propagated
            logger.exception("Quote notification failed for %s", quote.reference)
            log_security_event(
                SecurityEvent.QUOTE_NOTIFICATION_FAILED.value,
                level=logging.ERROR,
                reference=quote.reference,
                error=type(e).__name__,
            )
            await self.audit_sink.record(
                audit_entry(
                    AuditAction.QUOTE_NOTIFICATION.value,
                    "quote",
                    resource_id=quote.id,
                    success=False,
                    error_message=f"{type(e).__name__}: {e}"[:500],
                    details={"reference": quote.reference, "actor_type": ActorType.SYSTEM.value},
                )
            )
            return
        await self.audit_sink.record(
            audit_entry(
                AuditAction.QUOTE_NOTIFICATION.value,
                "quote",
                resource_id=quote.id,
                details={"reference": quote.reference, "actor_type": ActorType.SYSTEM.value},
            )
        )

    async def drain(self, timeout: float = 5.0) -> None:
        """Wait for in-flight notifications (application shutdown)."""
        if not self._tasks:
            return
        _, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        for task in pending:
            task.cancel()


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = InputSanitizer.sanitize_text(value)
    return cleaned or None


class QuoteService:
    """Accept public quote requests and list them for staff."""

    def __init__(
        self,
        quote_repo: IQuoteRepository,
        gate: QuoteAntiAbuseGate,
        dispatcher: QuoteNotificationDispatcher,
        audit_sink: IAuditSink,
    ) -> None:
        self.quote_repo = quote_repo
        self.gate = gate
        self.dispatcher = dispatcher
        self.audit_sink = audit_sink

    @traced("quote.submit")
    async def submit(
        self,
        submission: QuoteSubmission,
        unknown_fields: Iterable[str] = (),
        client: ClientContext | None = None,
    ) -> QuoteResult:
        """Gate, persist and dispatch the staff notification.

        The response does not wait for the notification. If persistence fails
        the counter claims are released so the sender can retry.
        """
        admission = await self.gate.admit(submission, unknown_fields, client)
        data = QuoteCreate(
            reference=generate_quote_reference(),
            name=_clean(submission.name) or "",
            email=EmailAddress(submission.email).value,
            phone=submission.phone.strip(),
            company=_clean(submission.company),
            whatsapp=submission.whatsapp.strip() if submission.whatsapp else None,
            product_name=_clean(submission.product_name),
            quantity=_clean(submission.quantity),
            project_details=_clean(submission.project_details),
            ip_address=client.ip_address if client else None,
            user_agent=client.user_agent if client else None,
        )
        try:
            quote = await self.quote_repo.create(data)
        except Exception:
            await self.gate.release(admission)
            raise
        await self.audit_sink.record(
            audit_entry(
                AuditAction.QUOTE_CREATE.value,
                "quote",
                client=client,
                resource_id=quote.id,
                details={"reference": quote.reference},
            )
        )
        add_span_attributes(quote_reference=quote.reference)
        self.dispatcher.dispatch(quote)
        return quote

    async def list_quotes(
        self, skip: int = 0, limit: int = 50, status: str | None = None
    ) -> tuple[list[QuoteResult], int]:
        return await self.quote_repo.list(skip=skip, limit=limit, status=status)
