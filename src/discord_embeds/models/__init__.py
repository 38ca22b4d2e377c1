"""
Module: models
Description: Package initialization for Pydantic data models.

This package contains the data models of a webhook message:
- WebhookMessage: Top-level payload with its mutators
- Embed and its sub-objects: One rich visual block
- Webhook: Destination descriptor with notification defaults

All models are exported here for convenient importing.
"""

from .embed import (
    Embed,
    EmbedAuthor,
    EmbedField,
    EmbedFooter,
    EmbedImage,
    WebhookMessage,
)
from .webhook import Webhook

__all__ = [
    "Embed",
    "EmbedAuthor",
    "EmbedField",
    "EmbedFooter",
    "EmbedImage",
    "WebhookMessage",
    "Webhook",
]
