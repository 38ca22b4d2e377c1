"""
Package: config
Description: Environment-driven settings for discord-embeds.
"""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
