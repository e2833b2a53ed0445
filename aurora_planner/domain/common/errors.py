from __future__ import annotations


class DomainError(Exception):
    """Base for errors raised by domain services. Surfaces translate these."""


class ValidationError(DomainError):
    pass


class NotFoundError(DomainError):
    pass


class ConflictError(DomainError):
    pass


class AuthenticationError(DomainError):
    pass


class AuthorizationError(DomainError):
    pass


class UpstreamError(DomainError):
    """A third-party API (LLM) failed or answered with a non-success status."""
