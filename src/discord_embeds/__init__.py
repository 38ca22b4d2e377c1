"""
discord-embeds: build rich embed messages and post them to Discord-style webhooks.

Messages are assembled with WebhookMessage mutators and delivered with
WebhookDeliveryClient, which follows the webhook's HTTP 429 rate limit
headers until the message goes through.
"""

__version__ = "0.1.0"

from discord_embeds.delivery import (
    AsyncWebhookDeliveryClient,
    RateLimitPolicy,
    WebhookDeliveryClient,
    send_to_webhook,
)
from discord_embeds.errors import (
    DiscordEmbedsError,
    EmbedValidationError,
    RateLimitExhaustedError,
    SerializationError,
    TransportError,
    WebhookHTTPError,
)
from discord_embeds.models import (
    Embed,
    EmbedAuthor,
    EmbedField,
    EmbedFooter,
    EmbedImage,
    Webhook,
    WebhookMessage,
)

__all__ = [
    "AsyncWebhookDeliveryClient",
    "RateLimitPolicy",
    "WebhookDeliveryClient",
    "send_to_webhook",
    "DiscordEmbedsError",
    "EmbedValidationError",
    "RateLimitExhaustedError",
    "SerializationError",
    "TransportError",
    "WebhookHTTPError",
    "Embed",
    "EmbedAuthor",
    "EmbedField",
    "EmbedFooter",
    "EmbedImage",
    "Webhook",
    "WebhookMessage",
]
