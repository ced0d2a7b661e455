"""
Not-found renderer - Recoverable display for unresolved missions.

Provides:
- NotFoundNotice with a message and a single way back into valid content
- HTML rendering for the notice
"""

import html
from dataclasses import dataclass
from typing import Any

from ashajourney.classroom.catalog import ContentCatalog
from ashajourney.classroom.routes import MAP_PATH, realm_path
from ashajourney.schemas import MAX_REALM_ID, MIN_REALM_ID, ResolutionResult

MAP_LABEL = "the Map"


@dataclass(frozen=True)
class NotFoundNotice:
    heading: str
    message: str
    return_label: str
    return_path: str


def _as_int(raw: Any):
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().isdigit() and raw.strip().isascii():
        return int(raw.strip())
    return None


def build_not_found_notice(realm_id: Any, mission_id: Any, catalog: ContentCatalog) -> NotFoundNotice:
    """
    Build the notice shown when a mission cannot be displayed.

    Links back to the realm home when the realm is valid, otherwise to the map.
    """
    realm = _as_int(realm_id)
    valid_realm = realm is not None and MIN_REALM_ID <= realm <= MAX_REALM_ID
    realm_name = catalog.realm_name(realm) if valid_realm else MAP_LABEL
    return_path = realm_path(realm) if valid_realm else MAP_PATH

    if not valid_realm:
        message = "Invalid realm specified. Please return to the map and select a valid realm."
    elif (_as_int(mission_id) or 0) <= 0:
        message = "Invalid mission specified. Please return to the realm and select a valid mission."
    else:
        message = (
            f"We couldn't find mission {mission_id} in {realm_name}. "
            "It may have been moved or doesn't exist."
        )

    return NotFoundNotice(
        heading="Mission not found",
        message=message,
        return_label=f"Return to {realm_name}",
        return_path=return_path,
    )


def notice_for_result(result: ResolutionResult, catalog: ContentCatalog) -> NotFoundNotice:
    return build_not_found_notice(result.realm_id, result.mission_id, catalog)


def get_not_found_css() -> str:
    """Get CSS styles for the not-found notice."""
    return """
    <style>
    .not-found {
        background: #1c1917;
        color: #fef3c7;
        border-radius: 12px;
        padding: 2em;
        text-align: center;
    }
    .not-found h2 {
        color: #fbbf24;
        margin-bottom: 0.75em;
    }
    .not-found a {
        display: inline-block;
        margin-top: 1em;
        padding: 0.5em 1em;
        background: #d97706;
        color: white;
        border-radius: 6px;
        text-decoration: none;
    }
    </style>
    """


def render_not_found_html(notice: NotFoundNotice) -> str:
    return (
        '<div class="not-found">'
        f"<h2>{html.escape(notice.heading)}</h2>"
        f"<p>{html.escape(notice.message)}</p>"
        f'<a href="{html.escape(notice.return_path, quote=True)}">{html.escape(notice.return_label)}</a>'
        "</div>"
    )
