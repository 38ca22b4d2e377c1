"""
Module: errors.py
Description: Error types raised by the embed builder and webhook delivery.

Every error carries a short machine-readable code next to its message so
callers can branch on failures without parsing text.

Key Components:
- DiscordEmbedsError: Base class for all package errors
- EmbedValidationError: Bad input to a message mutator
- SerializationError: Message could not be encoded for the wire
- TransportError: The HTTP transport failed before a response arrived
- WebhookHTTPError: Endpoint answered with a terminal status code
- RateLimitExhaustedError: A bounded retry policy gave up on HTTP 429
- RateLimited: Internal signal for a 429 response, drives the retry loop

Dependencies: typing
"""

from typing import Any, Dict, Optional


class DiscordEmbedsError(Exception):
    """Base class for discord-embeds errors."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details


class EmbedValidationError(DiscordEmbedsError, ValueError):
    """Raised when a message mutator receives invalid input or has no embed to act on."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("validation_error", message, details)


class SerializationError(DiscordEmbedsError):
    """Raised when a message cannot be converted to its JSON transmission format."""

    def __init__(self, message: str):
        super().__init__("serialization_error", message)


class TransportError(DiscordEmbedsError):
    """Raised when the POST fails at the network level (connect, timeout, DNS)."""

    def __init__(self, message: str, url: str):
        super().__init__("transport_error", message, {"url": url})
        self.url = url


class WebhookHTTPError(DiscordEmbedsError):
    """Raised when the webhook answers with a status that is neither success nor 429."""

    def __init__(self, status_code: int, reason: str, body: str = ""):
        super().__init__(
            "http_error",
            f"error posting webhook: {status_code} {reason}".rstrip(),
            {"status_code": status_code, "reason": reason, "body": body},
        )
        self.status_code = status_code
        self.reason = reason


class RateLimitExhaustedError(DiscordEmbedsError):
    """Raised when a bounded RateLimitPolicy stops retrying a rate-limited send."""

    def __init__(self, attempts: int, waited: float):
        super().__init__(
            "rate_limit_exhausted",
            f"webhook still rate limited after {attempts} attempts ({waited:.2f}s waited)",
            {"attempts": attempts, "waited": waited},
        )
        self.attempts = attempts
        self.waited = waited


class RateLimited(DiscordEmbedsError):
    """
    Internal signal for an HTTP 429 response.

    Holds the parsed rate-limit headers. ``remaining`` is None when the
    quota header was missing or not an integer; ``reset_after`` falls back
    to 0.0 when its header was missing or not a number.
    """

    def __init__(self, remaining: Optional[int], reset_after: float):
        super().__init__(
            "rate_limited",
            "webhook rate limited",
            {"remaining": remaining, "reset_after": reset_after},
        )
        self.remaining = remaining
        self.reset_after = reset_after
