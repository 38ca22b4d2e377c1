"""
Module: webhook.py
Description: Webhook target descriptor.

A Webhook bundles a destination URL with the default look of the
notifications sent to it (text, color, icon). It is the shape webhook
targets take in configuration files::

    {"webhook": "https://discord.com/api/webhooks/1/abc", "text": "Build failed",
     "color": "#E74C3C", "icon_url": "https://example.com/ci.png"}

Dependencies: pydantic
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .embed import WebhookMessage


class Webhook(BaseModel):
    """
    Destination webhook plus default notification appearance.

    Attributes:
        url: Webhook URL (``webhook`` key in configuration)
        icon_url: Icon shown as the embed thumbnail
        text: Default embed description
        color: Default embed color as a hex code
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    url: str = Field(..., alias="webhook", description="Webhook URL")
    icon_url: str = Field(default="", description="Notification icon URL")
    text: str = Field(default="", description="Default notification text")
    color: str = Field(default="", description="Default notification color as hex")

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate the webhook URL is an HTTP/HTTPS URL."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError("webhook url must be a valid HTTP/HTTPS URL")
        return v

    def build_message(self, title: str = "", url: str = "") -> WebhookMessage:
        """
        Build a message pre-filled with this webhook's defaults.

        The text becomes the embed description, the color (when set) the
        embed color and the icon (when set) the embed thumbnail.

        Args:
            title: Embed title
            url: Link the title points to

        Returns:
            New WebhookMessage with one embed

        Raises:
            EmbedValidationError: If the configured color is not a hex code
        """
        message = WebhookMessage.new(title, self.text, url)
        if self.color:
            message.set_color(self.color)
        if self.icon_url:
            message.set_thumbnail(self.icon_url)
        return message
