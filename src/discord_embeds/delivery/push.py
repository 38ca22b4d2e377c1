"""
Module: delivery/push.py
Description: Push delivery of webhook messages.

Implements HTTP POST delivery of a WebhookMessage with the webhook's rate
limit protocol: 200-204 is success, 429 is paused and retried according to
the RateLimitPolicy, and anything else (or a transport failure) ends the
delivery with an error.
"""

from typing import Optional, Union

import httpx

from discord_embeds.config.settings import settings
from discord_embeds.errors import RateLimited, RateLimitExhaustedError, TransportError, WebhookHTTPError
from discord_embeds.models.embed import WebhookMessage
from discord_embeds.models.webhook import Webhook
from discord_embeds.utils.logger import get_logger

from .retry import RateLimitPolicy, parse_rate_limit_headers

logger = get_logger(__name__)

JSON_HEADERS = {'Content-Type': 'application/json'}

WebhookTarget = Union[str, Webhook]


def _resolve_url(webhook: WebhookTarget) -> str:
    url = webhook.url if isinstance(webhook, Webhook) else webhook
    if not url or not isinstance(url, str):
        raise ValueError("webhook_url must be a non-empty string")
    if not url.startswith(('http://', 'https://')):
        raise ValueError("webhook_url must be a valid HTTP/HTTPS URL")
    return url


def _serialize(message: WebhookMessage) -> bytes:
    if not isinstance(message, WebhookMessage):
        raise ValueError("message must be a WebhookMessage instance")
    return message.to_json()


def _check_response(response: httpx.Response) -> httpx.Response:
    """
    Classify a webhook response.

    Returns the response for 200-204, raises RateLimited for 429 and
    WebhookHTTPError for every other status.
    """
    if 200 <= response.status_code <= 204:
        return response

    if response.status_code == 429:
        raise parse_rate_limit_headers(response.headers)

    logger.warning(
        "Webhook delivery HTTP error",
        status_code=response.status_code,
        reason=response.reason_phrase,
        response=response.text[:500]
    )
    raise WebhookHTTPError(response.status_code, response.reason_phrase, response.text[:500])


def _timeout(timeout_seconds: Optional[float], connect_seconds: Optional[float]) -> httpx.Timeout:
    return httpx.Timeout(
        timeout_seconds if timeout_seconds is not None else settings.request_timeout,
        connect=connect_seconds if connect_seconds is not None else settings.connect_timeout,
    )


class WebhookDeliveryClient:
    """
    Blocking HTTP client for posting messages to webhooks.

    A send blocks the caller until the message is delivered or a terminal
    error occurs, including any rate limit pauses. Every send runs its own
    retry loop; nothing is remembered between sends.

    Use as a context manager, or call close() when done::

        with WebhookDeliveryClient() as client:
            client.send(message, "https://discord.com/api/webhooks/1/abc")
    """

    def __init__(
        self,
        rate_limit_policy: Optional[RateLimitPolicy] = None,
        timeout_seconds: Optional[float] = None,
        connect_timeout_seconds: Optional[float] = None,
        user_agent: Optional[str] = None
    ):
        """
        Initialize webhook delivery client.

        Args:
            rate_limit_policy: Reaction to HTTP 429 (default from settings,
                which retries without limit)
            timeout_seconds: HTTP timeout in seconds for one POST
            connect_timeout_seconds: HTTP connect timeout in seconds
            user_agent: User-Agent header value
        """
        self.rate_limit_policy = rate_limit_policy or RateLimitPolicy.from_settings(settings)
        self.timeout = _timeout(timeout_seconds, connect_timeout_seconds)
        self._client = httpx.Client(
            timeout=self.timeout,
            headers={'User-Agent': user_agent or settings.user_agent}
        )

        logger.info(
            "Webhook delivery client initialized",
            timeout_seconds=self.timeout.read,
            rate_limit_policy=repr(self.rate_limit_policy)
        )

    def __enter__(self) -> "WebhookDeliveryClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _post(self, url: str, body: bytes, attempt_number: int) -> httpx.Response:
        logger.debug(
            "Attempting webhook delivery",
            host=httpx.URL(url).host,
            attempt=attempt_number
        )
        try:
            response = self._client.post(url, content=body, headers=JSON_HEADERS)
        except httpx.TransportError as e:
            logger.warning(
                "Webhook delivery transport error",
                host=httpx.URL(url).host,
                error=str(e),
                error_type=type(e).__name__
            )
            raise TransportError(f"error posting webhook: {e}", url) from e
        return _check_response(response)

    def send(self, message: WebhookMessage, webhook: WebhookTarget) -> httpx.Response:
        """
        Deliver a message to a webhook via HTTP POST.

        The message is serialized once; the same body is re-posted on every
        rate limited retry.

        Args:
            message: Message to deliver
            webhook: Webhook URL or Webhook descriptor

        Returns:
            The successful (200-204) response

        Raises:
            ValueError: If the message or the webhook URL is invalid
            SerializationError: If the message cannot be serialized
            TransportError: If the POST fails before a response arrives
            WebhookHTTPError: If the webhook answers with a terminal status
            RateLimitExhaustedError: If a bounded policy stops retrying
        """
        url = _resolve_url(webhook)
        body = _serialize(message)

        state = None
        try:
            for attempt in self.rate_limit_policy.retrying():
                with attempt:
                    state = attempt.retry_state
                    response = self._post(url, body, state.attempt_number)
        except RateLimited as e:
            logger.warning(
                "Webhook delivery gave up while rate limited",
                attempts=state.attempt_number,
                waited_seconds=state.idle_for
            )
            raise RateLimitExhaustedError(state.attempt_number, state.idle_for) from e

        logger.info(
            "Webhook message delivered",
            host=httpx.URL(url).host,
            status_code=response.status_code,
            attempts=state.attempt_number,
            response_time_ms=response.elapsed.total_seconds() * 1000
        )
        return response


class AsyncWebhookDeliveryClient:
    """
    Async HTTP client for posting messages to webhooks.

    Same delivery semantics as WebhookDeliveryClient; rate limit pauses use
    asyncio.sleep, so a send can be cancelled by cancelling its task.
    """

    def __init__(
        self,
        rate_limit_policy: Optional[RateLimitPolicy] = None,
        timeout_seconds: Optional[float] = None,
        connect_timeout_seconds: Optional[float] = None,
        user_agent: Optional[str] = None
    ):
        self.rate_limit_policy = rate_limit_policy or RateLimitPolicy.from_settings(settings)
        self.timeout = _timeout(timeout_seconds, connect_timeout_seconds)
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers={'User-Agent': user_agent or settings.user_agent}
        )

        logger.info(
            "Async webhook delivery client initialized",
            timeout_seconds=self.timeout.read,
            rate_limit_policy=repr(self.rate_limit_policy)
        )

    async def __aenter__(self) -> "AsyncWebhookDeliveryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, url: str, body: bytes, attempt_number: int) -> httpx.Response:
        logger.debug(
            "Attempting webhook delivery",
            host=httpx.URL(url).host,
            attempt=attempt_number
        )
        try:
            response = await self._client.post(url, content=body, headers=JSON_HEADERS)
        except httpx.TransportError as e:
            logger.warning(
                "Webhook delivery transport error",
                host=httpx.URL(url).host,
                error=str(e),
                error_type=type(e).__name__
            )
            raise TransportError(f"error posting webhook: {e}", url) from e
        return _check_response(response)

    async def send(self, message: WebhookMessage, webhook: WebhookTarget) -> httpx.Response:
        """Deliver a message to a webhook; see WebhookDeliveryClient.send."""
        url = _resolve_url(webhook)
        body = _serialize(message)

        state = None
        try:
            async for attempt in self.rate_limit_policy.async_retrying():
                with attempt:
                    state = attempt.retry_state
                    response = await self._post(url, body, state.attempt_number)
        except RateLimited as e:
            logger.warning(
                "Webhook delivery gave up while rate limited",
                attempts=state.attempt_number,
                waited_seconds=state.idle_for
            )
            raise RateLimitExhaustedError(state.attempt_number, state.idle_for) from e

        logger.info(
            "Webhook message delivered",
            host=httpx.URL(url).host,
            status_code=response.status_code,
            attempts=state.attempt_number,
            response_time_ms=response.elapsed.total_seconds() * 1000
        )
        return response


def send_to_webhook(
    message: WebhookMessage,
    webhook: WebhookTarget,
    rate_limit_policy: Optional[RateLimitPolicy] = None
) -> httpx.Response:
    """
    Deliver one message with a short-lived client.

    Args:
        message: Message to deliver
        webhook: Webhook URL or Webhook descriptor
        rate_limit_policy: Reaction to HTTP 429 (default from settings)

    Returns:
        The successful (200-204) response
    """
    with WebhookDeliveryClient(rate_limit_policy=rate_limit_policy) as client:
        return client.send(message, webhook)
