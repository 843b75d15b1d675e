"""Request-scoped values kept in contextvars.

RequestIDMiddleware sets the request id; the bearer-token dependency sets the
authenticated admin. Security log events and audit entries read them back.
"""

from contextvars import ContextVar

from app.shared.enums import ActorType

_current_actor_id: ContextVar[str | None] = ContextVar("current_actor_id", default=None)
_current_actor_type: ContextVar[ActorType] = ContextVar(
    "current_actor_type", default=ActorType.ANONYMOUS
)
_current_request_id: ContextVar[str | None] = ContextVar("current_request_id", default=None)


def set_current_actor(actor_id: str | None, actor_type: ActorType = ActorType.ADMIN) -> None:
    """Set the current actor for this request.

    Raises:
        ValueError: If actor_type is ADMIN and actor_id is empty.
    """
    if actor_type == ActorType.ADMIN and not actor_id:
        raise ValueError("actor_id is required when actor_type is ADMIN")
    _current_actor_id.set(actor_id)
    _current_actor_type.set(actor_type)


def get_current_actor_id() -> str | None:
    """Admin id of the authenticated caller, or None."""
    if _current_actor_type.get() != ActorType.ADMIN:
        return None
    return _current_actor_id.get()


def set_request_id(request_id: str | None) -> None:
    _current_request_id.set(request_id)


def get_request_id() -> str | None:
    return _current_request_id.get()
