"""Domain entities: business objects with identity and lifecycle rules."""

from app.domain.entities.two_factor import TwoFactorCredentialEntity

__all__ = ["TwoFactorCredentialEntity"]
