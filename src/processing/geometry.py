"""Planar geometry on lat/lng pairs: segment distance, nearest cable, zigzag.

Distances are Euclidean in raw degree space, not geodesic. Proximity
thresholds throughout the project are expressed in these same units.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from src.recording.models import Cable, NearestCable, Position

ZIGZAG_MIN_POINTS = 6
ZIGZAG_TURN_ANGLE = math.pi / 6
ZIGZAG_MIN_TURNS = 3


def normalize_heading(heading: float) -> float:
    """Wrap a heading in degrees into [0, 360)."""
    heading = heading % 360.0
    # Tiny negative inputs round up to exactly 360.0
    return 0.0 if heading >= 360.0 else heading


def distance_to_segment(point: Position, start: Position, end: Position) -> float:
    """Distance from point to the segment start-end.

    The projection parameter is clamped to [0, 1] so the closest point stays
    on the segment. A zero-length segment measures distance to start.
    """
    p = np.array([point.lat, point.lng], dtype=np.float64)
    a = np.array([start.lat, start.lng], dtype=np.float64)
    b = np.array([end.lat, end.lng], dtype=np.float64)

    ab = b - a
    len_sq = float(np.dot(ab, ab))
    if len_sq == 0.0:
        return float(np.linalg.norm(p - a))

    t = float(np.dot(p - a, ab)) / len_sq
    t = min(1.0, max(0.0, t))
    closest = a + t * ab
    return float(np.linalg.norm(p - closest))


def distance_to_cable(position: Position, cable: Cable) -> float:
    """Minimum distance from position to any segment of the cable (inf if none)."""
    best = math.inf
    for start, end in zip(cable.path, cable.path[1:]):
        best = min(best, distance_to_segment(position, start, end))
    return best


def find_nearest_cable(position: Position,
                       cables: Sequence[Cable]) -> NearestCable | None:
    """Return the cable with the closest segment and that distance.

    Returns None when there are no cables with at least one segment.
    """
    nearest: NearestCable | None = None
    for cable in cables:
        distance = distance_to_cable(position, cable)
        if math.isinf(distance):
            continue
        if nearest is None or distance < nearest.distance:
            nearest = NearestCable(cable=cable, distance=distance)
    return nearest


def detect_zigzag(positions: Sequence[Position]) -> bool:
    """Detect a zigzag course in a position history.

    Bearings are taken between consecutive positions; each turn whose
    absolute change (folded into [0, pi]) exceeds 30 degrees counts as a
    direction change. Three or more changes is a zigzag.
    """
    if len(positions) < ZIGZAG_MIN_POINTS:
        return False

    pts = np.array([(p.lat, p.lng) for p in positions], dtype=np.float64)
    diffs = np.diff(pts, axis=0)
    bearings = np.arctan2(diffs[:, 1], diffs[:, 0])

    turns = np.abs(np.diff(bearings))
    turns = np.where(turns > math.pi, 2 * math.pi - turns, turns)

    direction_changes = int(np.count_nonzero(turns > ZIGZAG_TURN_ANGLE))
    return direction_changes >= ZIGZAG_MIN_TURNS
