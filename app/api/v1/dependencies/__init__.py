"""Presentation-layer dependency injection (composition root).

Routes depend only on these providers; infrastructure is wired here.
"""

from app.api.v1.dependencies.auth import (
    CurrentPrincipal,
    get_client_context,
    get_current_principal,
    require_permission,
    require_role,
)
from app.api.v1.dependencies.db import (
    get_admin_repo,
    get_audit_log_repo,
    get_audit_sink,
    get_backup_code_repo,
    get_quote_repo,
    get_refresh_token_repo,
)
from app.api.v1.dependencies.security import (
    get_password_hasher,
    get_secret_encryptor,
    get_token_hasher,
    get_token_signer,
    get_totp_service,
)
from app.api.v1.dependencies.services import (
    get_admin_service,
    get_auth_service,
    get_authorization_service,
    get_captcha_verifier,
    get_counter_store,
    get_quote_dispatcher,
    get_quote_gate,
    get_quote_service,
    get_two_factor_service,
)

__all__ = [
    "CurrentPrincipal",
    "get_admin_repo",
    "get_admin_service",
    "get_audit_log_repo",
    "get_audit_sink",
    "get_auth_service",
    "get_authorization_service",
    "get_backup_code_repo",
    "get_captcha_verifier",
    "get_client_context",
    "get_counter_store",
    "get_current_principal",
    "get_password_hasher",
    "get_quote_dispatcher",
    "get_quote_gate",
    "get_quote_repo",
    "get_quote_service",
    "get_refresh_token_repo",
    "get_secret_encryptor",
    "get_token_hasher",
    "get_token_signer",
    "get_totp_service",
    "get_two_factor_service",
    "require_permission",
    "require_role",
]
