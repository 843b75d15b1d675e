"""Security headers middleware.

API responses carry no active content, so the policy is deny-everything.
Responses under the auth prefix also get Cache-Control: no-store because they
carry tokens, pending 2FA tokens, TOTP secrets or backup codes.
Raw ASGI (no BaseHTTPMiddleware).
"""

from typing import Callable

DEFAULT_HEADERS = {
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}
NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}


def SecurityHeadersMiddleware(
    app: Callable,
    headers: dict[str, str] | None = None,
    no_store_prefixes: tuple[str, ...] = ("/api/v1/auth",),
) -> Callable:
    """Add security headers the endpoint did not set itself. Raw ASGI."""
    base = [(k.lower().encode(), v.encode()) for k, v in (headers or DEFAULT_HEADERS).items()]
    no_store = [(k.lower().encode(), v.encode()) for k, v in NO_STORE_HEADERS.items()]

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        extra = base + no_store if scope.get("path", "").startswith(no_store_prefixes) else base

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                current = list(message.get("headers", []))
                present = {name.lower() for name, _ in current}
                current.extend(h for h in extra if h[0] not in present)
                message["headers"] = current
            await send(message)

        await app(scope, receive, send_wrapper)

    return asgi_app
