"""
Package: utils
Description: Shared helpers for discord-embeds.

Current utilities:
- logger: Structured logging configuration and helpers
"""

__all__ = []
