"""Text formatting helpers for the word-surgery front-end."""

from .board_text import format_time, render_target, render_pool, render_detected, render_session

__all__ = [
    "format_time",
    "render_target",
    "render_pool",
    "render_detected",
    "render_session",
]
