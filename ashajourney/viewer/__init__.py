"""
Asha Journey Viewer - Display helpers for the rendering layer.

This module provides:
- "Mission not found" notices with a way back into valid content
"""

from .not_found import (
    NotFoundNotice,
    build_not_found_notice,
    notice_for_result,
    get_not_found_css,
    render_not_found_html,
)

__all__ = [
    "NotFoundNotice",
    "build_not_found_notice",
    "notice_for_result",
    "get_not_found_css",
    "render_not_found_html",
]
