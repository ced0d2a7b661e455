"""
Asha Journey Schemas - Pydantic models and value types.

This module exports all schema classes for:
- Catalog: realms, mission descriptors, badges, numbering convention
- Progress: highlights, user profile, progress snapshot
- Resolution: resolver result values
"""

# Catalog schemas
from .catalog import (
    MIN_REALM_ID,
    MAX_REALM_ID,
    REALM_IDS,
    PREFIXED_REALMS,
    RealmId,
    RealmInfo,
    MissionDescriptor,
    BadgeInfo,
    CatalogData,
    full_mission_id,
    is_valid_realm_id,
)

# Progress schemas
from .progress import (
    SCHEMA_VERSION,
    DEFAULT_AVATAR_COLOR,
    Highlight,
    HighlightedItem,
    UserProfile,
    ProgressSnapshot,
    utc_now,
)

# Resolution schemas
from .resolution import (
    ResolutionStatus,
    ContentRef,
    ResolutionResult,
)

__all__ = [
    # Catalog
    'MIN_REALM_ID',
    'MAX_REALM_ID',
    'REALM_IDS',
    'PREFIXED_REALMS',
    'RealmId',
    'RealmInfo',
    'MissionDescriptor',
    'BadgeInfo',
    'CatalogData',
    'full_mission_id',
    'is_valid_realm_id',
    # Progress
    'SCHEMA_VERSION',
    'DEFAULT_AVATAR_COLOR',
    'Highlight',
    'HighlightedItem',
    'UserProfile',
    'ProgressSnapshot',
    'utc_now',
    # Resolution
    'ResolutionStatus',
    'ContentRef',
    'ResolutionResult',
]
