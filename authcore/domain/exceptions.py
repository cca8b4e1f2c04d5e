from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class ConfigurationError(Exception):
    """Process configuration is missing or malformed. Fatal at startup."""


class InvalidCredentialsError(DomainError):
    """Unknown email, provider-only account or wrong password."""


class EmailAlreadyExistsError(DomainError):
    """Email already belongs to another user."""


class TokenInvalidError(DomainError):
    """Bad signature, malformed, unknown or revoked token."""


class TokenExpiredError(DomainError):
    """Token signature is valid but its expiry has passed."""


class UserNotFoundError(DomainError):
    """Referenced user no longer exists."""


class UserInactiveError(DomainError):
    """User account is deactivated."""


class AlreadyLinkedToOtherAccountError(DomainError):
    """Provider identity is bound to a different user."""


class ProviderAlreadyLinkedError(DomainError):
    """User already has a different identity linked for this provider."""


class UnsupportedProviderError(DomainError):
    """Provider is not configured."""


class GoogleTokenValidationError(DomainError):
    """Google id_token could not be verified."""
