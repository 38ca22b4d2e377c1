"""
Module: conftest.py
Description: Shared pytest fixtures for discord-embeds tests.

Provides sample messages, a webhook URL for the mocked endpoint
(pytest-httpx) and rate limit policies that record their pauses instead
of sleeping, so retry behavior can be asserted without slow tests.
"""

import pytest

from discord_embeds.delivery.retry import RateLimitPolicy
from discord_embeds.models.embed import WebhookMessage

WEBHOOK_URL = "https://discord.com/api/webhooks/123456/test-token"


@pytest.fixture
def webhook_url():
    """Webhook URL served by the httpx_mock fixture."""
    return WEBHOOK_URL


@pytest.fixture
def sample_message():
    """
    Provide a fully populated message.

    Covers every embed attribute so serialization tests see all keys.
    """
    message = WebhookMessage.new("Deploy finished", "All checks green", "https://ci.example.com/builds/42")
    message.set_user("CI Bot", "https://ci.example.com/avatar.png")
    message.set_author("release-bot", "https://ci.example.com", "https://ci.example.com/icon.png")
    message.set_color("#2ECC71")
    message.add_field("Branch", "main", inline=True)
    message.add_field("Duration", "3m 12s")
    message.set_thumbnail("https://ci.example.com/thumb.png")
    message.set_image("https://ci.example.com/graph.png")
    message.set_footer("ci.example.com", "https://ci.example.com/footer.png")
    return message


@pytest.fixture
def empty_message():
    """Provide a message with no embeds."""
    return WebhookMessage()


@pytest.fixture
def recorded_sleeps():
    """List that collects every pause a recording policy takes."""
    return []


@pytest.fixture
def recording_policy(recorded_sleeps):
    """Unbounded policy that records pauses instead of sleeping."""
    return RateLimitPolicy(sleep=recorded_sleeps.append)


@pytest.fixture
def async_recording_policy(recorded_sleeps):
    """Unbounded policy for the async client that records pauses."""

    async def fake_sleep(seconds):
        recorded_sleeps.append(seconds)

    return RateLimitPolicy(async_sleep=fake_sleep)
