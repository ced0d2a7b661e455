"""Navigation path and not-found notice tests."""

import pytest

from ashajourney.classroom import (
    MAP_PATH,
    mission_path,
    missions_path,
    parse_mission_path,
    realm_path,
)
from ashajourney.schemas import ResolutionResult, ResolutionStatus
from ashajourney.viewer import (
    NotFoundNotice,
    build_not_found_notice,
    notice_for_result,
    render_not_found_html,
)


class TestRoutes:

    def test_paths(self):
        assert realm_path(3) == "/realm/3"
        assert mission_path(3, 2) == "/realm/3/mission/2"
        assert missions_path(2) == "/realm/2"
        assert missions_path(7) == "/realm7/missions"
        assert missions_path("x") == "/realm/x"

    @pytest.mark.parametrize("path,expected", [
        ("/realm/1/mission/3", ("1", "3")),
        ("/realm/1/mission/3/", ("1", "3")),
        ("/realm/abc/mission/3?from=map", ("abc", "3")),
        ("/realm/1", None),
        ("/map", None),
        ("/realm/1/mission/3/extra", None),
    ])
    def test_parse_mission_path(self, path, expected):
        assert parse_mission_path(path) == expected


class TestNotFoundNotice:

    def test_missing_mission_in_valid_realm(self, catalog):
        notice = build_not_found_notice("2", "9", catalog)
        assert notice.message == (
            "We couldn't find mission 9 in The Central Citadel. "
            "It may have been moved or doesn't exist."
        )
        assert notice.return_label == "Return to The Central Citadel"
        assert notice.return_path == "/realm/2"

    @pytest.mark.parametrize("realm", ["abc", "0", "8", None])
    def test_invalid_realm(self, catalog, realm):
        notice = build_not_found_notice(realm, "1", catalog)
        assert notice.message.startswith("Invalid realm specified.")
        assert notice.return_label == "Return to the Map"
        assert notice.return_path == MAP_PATH

    @pytest.mark.parametrize("mission", ["abc", "0", "-2"])
    def test_invalid_mission(self, catalog, mission):
        notice = build_not_found_notice("3", mission, catalog)
        assert notice.message.startswith("Invalid mission specified.")
        assert notice.return_path == "/realm/3"

    def test_notice_for_result(self, catalog):
        result = ResolutionResult(status=ResolutionStatus.NOT_FOUND, realm_id="5", mission_id="12")
        notice = notice_for_result(result, catalog)
        assert "mission 12 in The Council of Forks" in notice.message

    def test_html_is_escaped(self):
        notice = NotFoundNotice(
            heading="<script>alert(1)</script>",
            message="Shells & beads",
            return_label="Return to the Map",
            return_path="/map",
        )
        html = render_not_found_html(notice)
        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "Shells &amp; beads" in html
        assert 'href="/map"' in html
