"""
Package: delivery
Description: Webhook delivery for discord-embeds.

Provides blocking and async push delivery of webhook messages and the
rate limit retry policy they follow on HTTP 429.
"""

from .push import AsyncWebhookDeliveryClient, WebhookDeliveryClient, send_to_webhook
from .retry import RateLimitPolicy

__all__ = [
    "AsyncWebhookDeliveryClient",
    "WebhookDeliveryClient",
    "send_to_webhook",
    "RateLimitPolicy",
]
