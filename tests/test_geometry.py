"""Tests for segment distance, nearest-cable lookup and zigzag detection."""

from __future__ import annotations

import pytest

from src.processing.geometry import (
    detect_zigzag,
    distance_to_cable,
    distance_to_segment,
    find_nearest_cable,
    normalize_heading,
)
from src.recording.models import Cable, Position
from tests.conftest import zigzag_positions


class TestDistanceToSegment:
    def test_perpendicular_projection(self):
        """A point beside the segment measures the perpendicular distance."""
        d = distance_to_segment(Position(1.0, 0.5), Position(0.0, 0.0), Position(0.0, 1.0))
        assert d == pytest.approx(1.0)

    def test_clamps_before_start(self):
        """Points behind the start measure to the start point."""
        d = distance_to_segment(Position(0.0, -3.0), Position(0.0, 0.0), Position(0.0, 1.0))
        assert d == pytest.approx(3.0)

    def test_clamps_past_end(self):
        """Points beyond the end measure to the end point."""
        d = distance_to_segment(Position(3.0, 5.0), Position(0.0, 0.0), Position(0.0, 1.0))
        assert d == pytest.approx(5.0)

    def test_zero_length_segment(self):
        """A degenerate segment measures distance to its start."""
        d = distance_to_segment(Position(3.0, 4.0), Position(0.0, 0.0), Position(0.0, 0.0))
        assert d == pytest.approx(5.0)

    def test_point_on_segment(self):
        """A point lying on the segment is at distance zero."""
        d = distance_to_segment(Position(26.0, -87.5), Position(26.0, -88.0), Position(26.0, -87.0))
        assert d == pytest.approx(0.0)


class TestFindNearestCable:
    def test_waypoint_match_is_zero(self):
        """A vessel sitting on a waypoint is zero from that cable."""
        cable = Cable(
            id="c1", name="Keys Link",
            path=(Position(25.85, -80.25), Position(26.0, -80.0)),
        )
        nearest = find_nearest_cable(Position(25.85, -80.25), [cable])
        assert nearest is not None
        assert nearest.cable is cable
        assert nearest.distance == pytest.approx(0.0)

    def test_picks_closest_cable(self, straight_cable):
        """The nearest of several cables is returned."""
        far = Cable(id="far", name="Far Line",
                    path=(Position(27.0, -88.0), Position(27.0, -87.0)))
        nearest = find_nearest_cable(Position(26.01, -87.5), [far, straight_cable])
        assert nearest.cable.id == "cable-test"
        assert nearest.distance == pytest.approx(0.01)

    def test_no_cables_returns_none(self):
        """No cables means no nearest cable."""
        assert find_nearest_cable(Position(26.0, -87.0), []) is None

    def test_single_waypoint_cable_ignored(self):
        """Cables without a segment are skipped."""
        stub = Cable(id="stub", name="Stub", path=(Position(26.0, -87.0),))
        assert find_nearest_cable(Position(26.0, -87.0), [stub]) is None

    def test_distance_to_cable_uses_every_segment(self):
        """Cable distance is the minimum over all segments."""
        cable = Cable(id="bent", name="Bent",
                      path=(Position(0.0, 0.0), Position(0.0, 1.0), Position(1.0, 1.0)))
        assert distance_to_cable(Position(0.5, 1.2), cable) == pytest.approx(0.2)


class TestDetectZigzag:
    def test_straight_line_is_not_zigzag(self):
        """A straight track has no sharp turns."""
        positions = [Position(25.0 + i * 0.01, -86.0) for i in range(6)]
        assert detect_zigzag(positions) is False

    def test_alternating_sharp_turns(self):
        """Alternating 90 degree legs register as zigzag."""
        assert detect_zigzag(zigzag_positions(6)) is True

    def test_exactly_three_turns(self):
        """Three sharp turns are enough."""
        # Legs: N, NE, N, NE, NE -> three 45 degree turns
        positions = [
            Position(0.0, 0.0), Position(1.0, 0.0), Position(2.0, 1.0),
            Position(3.0, 1.0), Position(4.0, 2.0), Position(5.0, 3.0),
        ]
        assert detect_zigzag(positions) is True

    def test_two_turns_is_not_enough(self):
        """Two sharp turns are not a zigzag."""
        positions = [
            Position(0.0, 0.0), Position(1.0, 0.0), Position(2.0, 1.0),
            Position(3.0, 1.0), Position(4.0, 1.0), Position(5.0, 1.0),
        ]
        assert detect_zigzag(positions) is False

    def test_gentle_turns_ignored(self):
        """Turns under 30 degrees do not count."""
        # 20 degree alternation stays under the 30 degree threshold
        positions = [Position(0.0, 0.0)]
        for i in range(8):
            dlng = 0.18 if i % 2 else -0.18   # atan(0.18) ~ 10 degrees
            last = positions[-1]
            positions.append(Position(last.lat + 1.0, last.lng + dlng))
        assert detect_zigzag(positions) is False

    def test_too_few_points(self):
        """Fewer than six positions never zigzag."""
        assert detect_zigzag(zigzag_positions(5)) is False
        assert detect_zigzag([]) is False


class TestNormalizeHeading:
    @pytest.mark.parametrize("raw, expected", [
        (0.0, 0.0), (359.5, 359.5), (360.0, 0.0), (370.0, 10.0), (-10.0, 350.0),
    ])
    def test_wraps_into_range(self, raw, expected):
        """Headings wrap into [0, 360)."""
        assert normalize_heading(raw) == pytest.approx(expected)

    def test_tiny_negative_stays_below_360(self):
        """A tiny negative heading does not round up to 360."""
        assert 0.0 <= normalize_heading(-1e-17) < 360.0
