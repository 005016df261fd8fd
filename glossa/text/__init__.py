"""Text helpers."""

from .normalize import format_text

__all__ = ["format_text"]
