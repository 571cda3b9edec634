"""Unified exception hierarchy for redistore.

All errors raised by the session store inherit from RedistoreException,
so callers can catch the base class or target a specific failure.

Categories:
- BusinessException: payload rules (serialization, size limits)
- SecurityException: cookie authentication failures
- InfrastructureException: cache failures, timeouts, store construction
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class RedistoreException(Exception):
    """Base exception for all redistore errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "SESSION_CACHE").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Business Exceptions
# =============================================================================


class BusinessException(RedistoreException):
    """Session payload rule violations."""


class SerializationError(BusinessException):
    """Session values cannot be converted to or from bytes."""

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message, code="SESSION_SERIALIZATION", context=context)


class NonStringKeyError(SerializationError):
    """A non-string key was found while serializing to a text format."""

    def __init__(self, key: object) -> None:
        super().__init__(
            f"Non-string key value, cannot serialize session to JSON: {key!r}",
            context={"key": repr(key)},
        )
        self.key = key


class PayloadTooLargeError(BusinessException):
    """The serialized session exceeds the configured maximum length."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            f"Session payload of {size} bytes exceeds the maximum length of {limit} bytes",
            code="SESSION_PAYLOAD_TOO_LARGE",
            context={"size": size, "limit": limit},
        )
        self.size = size
        self.limit = limit


# =============================================================================
# Security Exceptions
# =============================================================================


class SecurityException(RedistoreException):
    """Authentication failures of session cookies."""


class CookieDecodeError(SecurityException):
    """A cookie token failed authentication, expired, or is malformed.

    ``errors`` holds the per-codec failures when several key pairs were tried.
    """

    def __init__(self, message: str, errors: list[Exception] | None = None) -> None:
        super().__init__(message, code="SESSION_COOKIE_DECODE")
        self.errors: list[Exception] = errors if errors is not None else []


class CookieEncodeError(SecurityException):
    """A cookie value could not be encoded, e.g. the token exceeds the length limit."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="SESSION_COOKIE_ENCODE")


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(RedistoreException):
    """Cache and network failures."""


class CacheError(InfrastructureException):
    """A key-value cache operation failed."""

    def __init__(self, message: str, operation: str, key: str | None = None) -> None:
        context: dict = {"operation": operation}
        if key is not None:
            context["key"] = key
        super().__init__(message, code="SESSION_CACHE", context=context)
        self.operation = operation


class CacheTimeoutError(CacheError):
    """A cache operation exceeded its deadline."""


class ConstructionError(InfrastructureException):
    """The store could not be created, e.g. the cache is unreachable."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="SESSION_CONSTRUCTION")
