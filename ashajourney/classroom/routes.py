"""Navigation paths for realms and missions."""

import re
from typing import Optional

MAP_PATH = "/map"

# realm 7 has its own missions page
CUSTOM_MISSIONS_PATHS = {7: "/realm7/missions"}

MISSION_PATH_PATTERN = re.compile(r"^/realm/(?P<realm>[^/]+)/mission/(?P<mission>[^/]+)/?$")


def realm_path(realm_id) -> str:
    return f"/realm/{realm_id}"


def missions_path(realm_id) -> str:
    try:
        realm = int(realm_id)
    except (TypeError, ValueError):
        return realm_path(realm_id)
    return CUSTOM_MISSIONS_PATHS.get(realm, realm_path(realm))


def mission_path(realm_id, mission_id) -> str:
    return f"/realm/{realm_id}/mission/{mission_id}"


def parse_mission_path(path: str) -> Optional[tuple[str, str]]:
    """
    Extract the raw (realm, mission) strings from a mission path.

    The values are untrusted; the resolver validates them.
    """
    match = MISSION_PATH_PATTERN.match(path.split("?", 1)[0])
    if not match:
        return None
    return match.group("realm"), match.group("mission")
