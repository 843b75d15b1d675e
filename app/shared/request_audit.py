"""Client metadata recorded on refresh sessions and audit entries."""

from __future__ import annotations

from starlette.requests import Request

MAX_USER_AGENT_LENGTH = 512


def client_ip(request: Request, trust_forwarded_for: bool = False) -> str | None:
    """Peer address, or the first X-Forwarded-For hop when running behind a trusted proxy.

    The header is client-controlled, so it is ignored unless the deployment
    says a proxy in front of the app overwrites it.
    """
    if trust_forwarded_for:
        forwarded = request.headers.get("X-Forwarded-For", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else None


def client_user_agent(request: Request) -> str | None:
    user_agent = request.headers.get("User-Agent")
    return user_agent[:MAX_USER_AGENT_LENGTH] if user_agent else None
