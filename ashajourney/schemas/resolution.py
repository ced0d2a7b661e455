"""
Resolution result schemas for Asha Journey.

The mission resolver never raises past its boundary; callers get a
ResolutionResult whose status tells them what to render.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ResolutionStatus(str, Enum):
    RESOLVED = "resolved"
    INVALID_IDENTIFIER = "invalid_identifier"
    NOT_FOUND = "not_found"
    CANCELLED = "cancelled"     # superseded by a newer navigation


@dataclass(frozen=True)
class ContentRef:
    """Loaded mission content plus display metadata."""
    locator: str
    realm_id: int
    mission_number: int
    full_mission_id: int
    title: str
    subtitle: str
    content: Any = None


@dataclass(frozen=True)
class ResolutionResult:
    status: ResolutionStatus
    realm_id: Any                   # raw value as received
    mission_id: Any                 # raw value as received
    content_ref: Optional[ContentRef] = None
    message: str = ""
    attempted: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == ResolutionStatus.RESOLVED
