"""
Asha Journey Classroom - Runtime components for resolving missions and tracking progress.

This module provides:
- ContentCatalog: realms, missions and badges
- MissionResolver: (realm, mission) -> content with ordered fallbacks
- ProgressStore: the learner's persisted progress snapshot
- ProgressPolicy: locks, unlocks and navigation
"""

from .catalog import (
    ContentCatalog,
    load_catalog,
    build_catalog_data,
    UNKNOWN_REALM_NAME,
    UNKNOWN_REALM_FOCUS,
)

from .resolver import (
    MissionResolver,
    ResolutionSession,
    ContentLoader,
    RegistryContentLoader,
    CatalogContentLoader,
    CANDIDATE_TEMPLATES,
    SIMULATOR_FALLBACKS,
    LEGACY_TEMPLATE,
    parse_identifier,
    validate_identifiers,
    candidate_locators,
)

from .storage import (
    SnapshotStorage,
    STORAGE_KEY,
)

from .progress import (
    ProgressStore,
    BASIC_PROTECTED_FIELDS,
    FULL_PROTECTED_FIELDS,
)

from .policy import (
    ProgressPolicy,
    RealmState,
    MissionAvailability,
    CompletionOutcome,
    NavigationMission,
    NavigationRealm,
    merge_snapshot,
)

from .routes import (
    MAP_PATH,
    realm_path,
    missions_path,
    mission_path,
    parse_mission_path,
)

__all__ = [
    # Catalog
    "ContentCatalog",
    "load_catalog",
    "build_catalog_data",
    "UNKNOWN_REALM_NAME",
    "UNKNOWN_REALM_FOCUS",
    # Resolver
    "MissionResolver",
    "ResolutionSession",
    "ContentLoader",
    "RegistryContentLoader",
    "CatalogContentLoader",
    "CANDIDATE_TEMPLATES",
    "SIMULATOR_FALLBACKS",
    "LEGACY_TEMPLATE",
    "parse_identifier",
    "validate_identifiers",
    "candidate_locators",
    # Storage
    "SnapshotStorage",
    "STORAGE_KEY",
    # Progress
    "ProgressStore",
    "BASIC_PROTECTED_FIELDS",
    "FULL_PROTECTED_FIELDS",
    # Policy
    "ProgressPolicy",
    "RealmState",
    "MissionAvailability",
    "CompletionOutcome",
    "NavigationMission",
    "NavigationRealm",
    "merge_snapshot",
    # Routes
    "MAP_PATH",
    "realm_path",
    "missions_path",
    "mission_path",
    "parse_mission_path",
]
