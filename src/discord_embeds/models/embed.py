"""
Module: embed.py
Description: Webhook message and embed data models.

Defines the rich message payload posted to a Discord-style webhook: the
top-level WebhookMessage and the Embed blocks it carries, built up in place
through mutator methods and serialized once at send time.

Key Components:
- WebhookMessage: Top-level payload (display identity, content, embeds)
- Embed: One rich visual block (author, title, fields, images, footer...)
- EmbedAuthor / EmbedField / EmbedFooter / EmbedImage: Embed sub-objects
- Validation: Pydantic v2 with validate_assignment

Every mutator that changes an embed sub-attribute targets the first embed
(``embeds[0]``) and raises EmbedValidationError when there is none. The
single exception is set_author(), which seeds the first embed itself.

Dependencies: pydantic, json, re, datetime
"""

import json
import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import PydanticSerializationError

from discord_embeds.errors import EmbedValidationError, SerializationError

if TYPE_CHECKING:
    import httpx

    from discord_embeds.delivery.retry import RateLimitPolicy
    from discord_embeds.models.webhook import Webhook

_HEX_PREFIX = re.compile(r"^(?:0[xX]|#)")
_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")

# Colors are signed 64-bit integers on the wire
MAX_COLOR = 0x7FFFFFFFFFFFFFFF

# RFC 3339, second precision, UTC designator
_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class EmbedAuthor(BaseModel):
    """Author line shown above the embed title."""

    model_config = ConfigDict(validate_assignment=True)

    name: str
    url: str
    icon_url: str


class EmbedField(BaseModel):
    """A name/value pair rendered inside an embed, optionally inline."""

    model_config = ConfigDict(validate_assignment=True)

    name: str
    value: str
    inline: bool = False


class EmbedFooter(BaseModel):
    """Footer text with an optional icon."""

    model_config = ConfigDict(validate_assignment=True)

    text: str
    icon_url: str = ""


class EmbedImage(BaseModel):
    """Image reference used for both thumbnails and main images."""

    model_config = ConfigDict(validate_assignment=True)

    url: str


class Embed(BaseModel):
    """
    One rich visual block of a webhook message.

    Attributes:
        author: Author line (name, link, icon)
        title: Title text
        url: Link the title points to
        description: Body text
        timestamp: RFC 3339 UTC timestamp string
        color: Sidebar color as an integer (0 means unset)
        fields: Ordered name/value fields
        thumbnail: Small image in the top-right corner
        image: Large image under the body
        footer: Footer text and icon
    """

    model_config = ConfigDict(validate_assignment=True)

    author: Optional[EmbedAuthor] = None
    title: str = ""
    url: str = ""
    description: str = ""
    timestamp: str = ""
    color: int = Field(default=0, ge=0, le=MAX_COLOR, description="Embed color as an integer")
    fields: List[EmbedField] = []
    thumbnail: Optional[EmbedImage] = None
    image: Optional[EmbedImage] = None
    footer: Optional[EmbedFooter] = None


class WebhookMessage(BaseModel):
    """
    Top-level payload posted to a webhook.

    Create one empty (``WebhookMessage()``) or with a first embed through
    ``WebhookMessage.new()``, then populate it with the mutators. Mutators
    change the instance in place and return it so calls can be chained::

        message = (
            WebhookMessage.new("Deploy finished", "All checks green", "https://ci.example.com/1")
            .set_color("#2ECC71")
            .add_field("Branch", "main", inline=True)
            .set_timestamp()
        )

    Embed mutators always act on the first embed and never create it:
    set_color, set_thumbnail, set_image, set_footer, set_timestamp and
    add_field raise EmbedValidationError on a message without embeds.
    set_author is the one seeding mutator; it appends the first embed when
    none exists. set_user and set_content touch only top-level attributes.

    Instances are not safe to mutate from several threads at once.
    """

    model_config = ConfigDict(validate_assignment=True)

    username: str = Field(default="", description="Display name override")
    avatar_url: str = Field(default="", description="Display avatar override")
    content: str = Field(default="", description="Plain text message content")
    embeds: List[Embed] = []

    @classmethod
    def new(cls, title: str, description: str, url: str) -> "WebhookMessage":
        """
        Create a message holding exactly one embed.

        Args:
            title: Embed title
            description: Embed body text
            url: Link the title points to

        Returns:
            New WebhookMessage whose only embed carries the three values
        """
        return cls(embeds=[Embed(title=title, description=description, url=url)])

    def _first_embed(self, action: str) -> Embed:
        if not self.embeds:
            raise EmbedValidationError(
                f"cannot {action}: message must have at least one embed",
                {"action": action},
            )
        return self.embeds[0]

    def set_user(self, username: str, avatar_url: str) -> "WebhookMessage":
        """Override the display name and avatar the webhook posts as."""
        self.username = username
        self.avatar_url = avatar_url
        return self

    def set_content(self, content: str) -> "WebhookMessage":
        """Set the plain text content shown above the embeds."""
        self.content = content
        return self

    def set_author(self, name: str, url: str, icon_url: str) -> "WebhookMessage":
        """
        Set the author of the first embed.

        Appends a new embed holding only the author when the message has
        no embeds yet, so this never fails.
        """
        author = EmbedAuthor(name=name, url=url, icon_url=icon_url)
        if not self.embeds:
            self.embeds.append(Embed(author=author))
        else:
            self.embeds[0].author = author
        return self

    def set_color(self, color: str) -> "WebhookMessage":
        """
        Set the first embed's color from a hex code.

        Accepts an optional ``0x``, ``0X`` or ``#`` prefix, so "#1A2B3C",
        "0x1A2B3C" and "1A2B3C" are equivalent.

        Args:
            color: Hex color string

        Raises:
            EmbedValidationError: If there is no embed or the hex code is
                invalid. The stored color is left unchanged.
        """
        embed = self._first_embed("set color")
        digits = _HEX_PREFIX.sub("", color, count=1)
        if not _HEX_DIGITS.fullmatch(digits):
            raise EmbedValidationError("invalid hex code passed", {"color": color})
        value = int(digits, 16)
        if value > MAX_COLOR:
            raise EmbedValidationError("hex code out of range", {"color": color})
        embed.color = value
        return self

    def set_thumbnail(self, url: str) -> "WebhookMessage":
        """Set the first embed's thumbnail image."""
        self._first_embed("set thumbnail").thumbnail = EmbedImage(url=url)
        return self

    def set_image(self, url: str) -> "WebhookMessage":
        """Set the first embed's main image."""
        self._first_embed("set image").image = EmbedImage(url=url)
        return self

    def set_footer(self, text: str, icon_url: str = "") -> "WebhookMessage":
        """Set the first embed's footer text and icon."""
        self._first_embed("set footer").footer = EmbedFooter(text=text, icon_url=icon_url)
        return self

    def set_timestamp(self) -> "WebhookMessage":
        """Stamp the first embed with the current time in UTC."""
        embed = self._first_embed("set timestamp")
        embed.timestamp = datetime.now(timezone.utc).strftime(_TIMESTAMP_FORMAT)
        return self

    def add_field(self, name: str, value: str, inline: bool = False) -> "WebhookMessage":
        """
        Append a field to the first embed.

        Fields keep their insertion order; duplicates are allowed.
        """
        self._first_embed("add field").fields.append(
            EmbedField(name=name, value=value, inline=inline)
        )
        return self

    def to_payload(self) -> Dict[str, Any]:
        """
        Build the JSON-ready webhook payload.

        Empty attributes are omitted, except ``embeds`` which is always
        present, even as an empty list.

        Returns:
            Dictionary in the webhook transmission format
        """
        payload = self.model_dump(mode="json", exclude_defaults=True)
        payload.setdefault("embeds", [])
        return payload

    def to_json(self) -> bytes:
        """
        Serialize the message to the UTF-8 JSON body sent on the wire.

        Raises:
            SerializationError: If the message cannot be encoded
        """
        try:
            return json.dumps(self.to_payload(), ensure_ascii=False).encode("utf-8")
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise SerializationError(f"message cannot be serialized: {e}") from e

    def send_to_webhook(
        self,
        webhook: Union[str, "Webhook"],
        rate_limit_policy: Optional["RateLimitPolicy"] = None
    ) -> "httpx.Response":
        """
        Post this message to a webhook, waiting out any rate limiting.

        Shortcut for discord_embeds.delivery.send_to_webhook().

        Args:
            webhook: Webhook URL or Webhook descriptor
            rate_limit_policy: Reaction to HTTP 429 (default from settings)

        Returns:
            The successful (200-204) response
        """
        from discord_embeds.delivery.push import send_to_webhook
        return send_to_webhook(self, webhook, rate_limit_policy=rate_limit_policy)
