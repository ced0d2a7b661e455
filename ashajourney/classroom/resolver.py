"""
MissionResolver - Map a (realm, mission) pair to loadable content.

Provides:
- Identifier validation for values decoded from a navigation location
- The realm-specific full mission id convention
- Ordered candidate locators, probed one at a time
- ResolutionSession, which discards results of superseded navigations
"""

import logging
from typing import Any, Callable, Mapping, Optional, Protocol

from ashajourney.errors import ContentNotFound, InvalidIdentifier, MissionNotFound, ResolutionError
from ashajourney.schemas import (
    MAX_REALM_ID,
    MIN_REALM_ID,
    ContentRef,
    ResolutionResult,
    ResolutionStatus,
    full_mission_id,
)

from .catalog import ContentCatalog

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Candidate tables (most specific first)
# -----------------------------------------------------------------------------

CANDIDATE_TEMPLATES = (
    "realm{realm}/mission{mission}",    # mission-specific module
    "realm{realm}/mission",             # generic mission handler, takes the id
    "realm{realm}/missions",            # missions index
)

# Only realms whose missions are themed as standalone simulators.
SIMULATOR_FALLBACKS: dict[int, tuple[str, ...]] = {
    1: (
        "barter-web-challenge",
        "currency-value-simulator",
        "inflation-simulator",
    ),
    4: (
        "mining-simulator",
        "consensus-simulator",
        "energy-simulator",
        "africa-simulator",
        "knowledge-simulator",
        "halving-simulator",
    ),
}

LEGACY_TEMPLATE = "realms/Realm{realm}/Mission{mission}/index"


class ContentLoader(Protocol):
    """Content-loading collaborator owned by the rendering layer."""

    async def load(self, locator: str) -> Any:
        """Return content for the locator or raise ContentNotFound."""
        ...


class RegistryContentLoader:
    """Loader backed by a mapping of locator -> content object."""

    def __init__(self, modules: Mapping[str, Any]):
        self.modules = dict(modules)

    async def load(self, locator: str) -> Any:
        if locator not in self.modules:
            raise ContentNotFound(locator)
        return self.modules[locator]


class CatalogContentLoader:
    """Loader that checks locators against the catalog's content list."""

    def __init__(self, catalog: ContentCatalog):
        self.catalog = catalog

    async def load(self, locator: str) -> Any:
        if not self.catalog.has_content(locator):
            raise ContentNotFound(locator)
        return locator


# -----------------------------------------------------------------------------
# Identifier handling
# -----------------------------------------------------------------------------

def parse_identifier(raw: Any, name: str) -> int:
    """
    Parse a loosely-typed identifier into a positive integer.

    Accepts ints and decimal strings (surrounding whitespace ignored).

    Raises:
        InvalidIdentifier: If the value is missing, non-numeric or not positive
    """
    if isinstance(raw, bool):
        raise InvalidIdentifier(f"Invalid {name} id: {raw!r}", field=name)
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and raw.strip().isdigit() and raw.strip().isascii():
        value = int(raw.strip())
    else:
        raise InvalidIdentifier(f"Invalid {name} id: {raw!r}", field=name)

    if value <= 0:
        raise InvalidIdentifier(f"Invalid {name} id: {raw!r}", field=name)
    return value


def validate_identifiers(realm_id: Any, mission_id: Any) -> tuple[int, int]:
    """Validate a raw (realm, mission) pair, returning ints."""
    try:
        realm = parse_identifier(realm_id, "realm")
        if not MIN_REALM_ID <= realm <= MAX_REALM_ID:
            raise InvalidIdentifier(
                f"Realm {realm} is out of valid range ({MIN_REALM_ID}-{MAX_REALM_ID})",
                field="realm",
            )
        mission = parse_identifier(mission_id, "mission")
    except InvalidIdentifier as e:
        e.realm_id = realm_id
        e.mission_id = mission_id
        raise
    return realm, mission


def candidate_locators(realm_id: int, mission_id: int, content_ref: Optional[str] = None) -> list[str]:
    """
    Ordered content locators to try for a validated pair.

    A catalog `content_ref` for the mission goes first; duplicates are dropped.
    """
    locators = [content_ref] if content_ref else []
    locators.extend(
        template.format(realm=realm_id, mission=mission_id)
        for template in CANDIDATE_TEMPLATES
    )
    locators.extend(
        f"realm{realm_id}/{name}" for name in SIMULATOR_FALLBACKS.get(realm_id, ())
    )
    locators.append(LEGACY_TEMPLATE.format(realm=realm_id, mission=mission_id))

    candidates = []
    for locator in locators:
        if locator not in candidates:
            candidates.append(locator)
    return candidates


class MissionResolver:
    """
    Resolve navigation identifiers to content.

    Resolution is a pure function of the catalog, the loader and the
    identifiers: candidates are probed sequentially and the first one that
    loads wins.
    """

    def __init__(self, catalog: ContentCatalog, loader: Optional[ContentLoader] = None):
        """
        Initialize resolver.

        Args:
            catalog: ContentCatalog for titles and realm names
            loader: Content-loading collaborator (default: CatalogContentLoader)
        """
        self.catalog = catalog
        self.loader = loader or CatalogContentLoader(catalog)

    def describe(self, realm_id: int, mission_id: int) -> tuple[str, str]:
        """Return (title, subtitle) for display."""
        mission = self.catalog.mission(realm_id, mission_id)
        title = mission.title if mission else f"Mission {mission_id}"
        subtitle = f"A learning journey in {self.catalog.realm_name(realm_id)}"
        return title, subtitle

    async def resolve_or_raise(
        self,
        realm_id: Any,
        mission_id: Any,
        is_current: Optional[Callable[[], bool]] = None,
    ) -> Optional[ContentRef]:
        """
        Resolve a pair, raising on failure.

        Returns None if `is_current` reports the request was superseded.

        Raises:
            InvalidIdentifier: If either id is malformed or out of range
            MissionNotFound: If no candidate loads
        """
        realm, mission = validate_identifiers(realm_id, mission_id)
        full_id = full_mission_id(realm, mission)
        descriptor = self.catalog.mission(realm, mission)
        candidates = candidate_locators(realm, mission, descriptor.content_ref if descriptor else None)
        logger.debug(f"Resolving realm {realm} mission {mission} (full id {full_id}): {candidates}")

        for locator in candidates:
            if is_current is not None and not is_current():
                logger.debug(f"Stopped resolving realm {realm} mission {mission}: superseded")
                return None
            try:
                content = await self.loader.load(locator)
            except ContentNotFound:
                logger.debug(f"Locator {locator} not found, trying next")
                continue

            logger.info(f"Resolved realm {realm} mission {mission} to {locator}")
            title, subtitle = self.describe(realm, mission)
            return ContentRef(
                locator=locator,
                realm_id=realm,
                mission_number=mission,
                full_mission_id=full_id,
                title=title,
                subtitle=subtitle,
                content=content,
            )

        raise MissionNotFound(realm_id, mission_id, attempted=candidates)

    async def resolve(
        self,
        realm_id: Any,
        mission_id: Any,
        is_current: Optional[Callable[[], bool]] = None,
    ) -> ResolutionResult:
        """Resolve a pair into a result value. Never raises ResolutionError."""
        try:
            content_ref = await self.resolve_or_raise(realm_id, mission_id, is_current)
        except InvalidIdentifier as e:
            logger.warning(f"Invalid mission identifiers realm={realm_id!r} mission={mission_id!r}: {e}")
            return ResolutionResult(
                status=ResolutionStatus.INVALID_IDENTIFIER,
                realm_id=realm_id,
                mission_id=mission_id,
                message=str(e),
            )
        except MissionNotFound as e:
            logger.warning(f"{e}; tried {len(e.attempted)} locators")
            return ResolutionResult(
                status=ResolutionStatus.NOT_FOUND,
                realm_id=realm_id,
                mission_id=mission_id,
                message=str(e),
                attempted=e.attempted,
            )
        except ResolutionError as e:
            logger.warning(f"Could not resolve realm={realm_id!r} mission={mission_id!r}: {e}")
            return ResolutionResult(
                status=ResolutionStatus.NOT_FOUND,
                realm_id=realm_id,
                mission_id=mission_id,
                message=str(e),
            )

        if content_ref is None:
            return ResolutionResult(
                status=ResolutionStatus.CANCELLED,
                realm_id=realm_id,
                mission_id=mission_id,
            )
        return ResolutionResult(
            status=ResolutionStatus.RESOLVED,
            realm_id=realm_id,
            mission_id=mission_id,
            content_ref=content_ref,
        )


class ResolutionSession:
    """
    Track the active navigation so stale resolutions are dropped.

    Each navigate() call supersedes earlier ones. A superseded call stops
    probing at its next candidate and returns None instead of a result.
    """

    def __init__(self, resolver: MissionResolver):
        self.resolver = resolver
        self._generation = 0
        self._active: Optional[tuple[int, str, str]] = None

    @property
    def active_request(self) -> Optional[tuple[str, str]]:
        """Identifier pair of the most recent navigation."""
        if self._active is None:
            return None
        return self._active[1], self._active[2]

    async def navigate(self, realm_id: Any, mission_id: Any) -> Optional[ResolutionResult]:
        self._generation += 1
        token = (self._generation, str(realm_id), str(mission_id))
        self._active = token

        def is_current() -> bool:
            return self._active == token

        result = await self.resolver.resolve(realm_id, mission_id, is_current=is_current)
        if not is_current() or result.status == ResolutionStatus.CANCELLED:
            logger.debug(f"Discarding stale resolution for realm={realm_id!r} mission={mission_id!r}")
            return None
        return result
