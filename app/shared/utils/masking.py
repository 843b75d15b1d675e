"""Masking helpers for log-safe identifiers."""


def mask_email(email: str | None) -> str:
    """Return 'j***@example.com' for 'jane@example.com'; '***' when unparseable."""
    if not email or "@" not in email:
        return "***"
    local, _, domain = email.strip().lower().partition("@")
    return f"{local[:1]}***@{domain}"


def mask_ip(ip: str | None) -> str | None:
    """Drop the last IPv4 octet (or the tail of an IPv6 address)."""
    if not ip:
        return ip
    if "." in ip:
        return ".".join(ip.split(".")[:3] + ["0"])
    if ":" in ip:
        return ":".join(ip.split(":")[:3]) + "::"
    return ip
