"""Shared test fixtures: configs, seeded generators, and hand-placed vessels."""

from __future__ import annotations

import numpy as np
import pytest

from src.config import AppConfig, DetectionConfig, MotionConfig, WorldConfig
from src.recording.models import (
    AisStatus,
    Behavior,
    Cable,
    Infrastructure,
    Position,
    Vessel,
    VesselType,
)


@pytest.fixture
def motion_config() -> MotionConfig:
    return MotionConfig()


@pytest.fixture
def detection_config() -> DetectionConfig:
    return DetectionConfig()


@pytest.fixture
def world_config() -> WorldConfig:
    return WorldConfig()


@pytest.fixture
def app_config() -> AppConfig:
    config = AppConfig()
    config.simulation.seed = 7
    return config


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def straight_cable() -> Cable:
    """East-west cable along lat 26.0 from lng -88.0 to -87.0."""
    return Cable(
        id="cable-test",
        name="Test Line",
        path=(Position(26.0, -88.0), Position(26.0, -87.0)),
    )


@pytest.fixture
def infrastructure(straight_cable) -> Infrastructure:
    return Infrastructure(cables=(straight_cable,))


class FixedRandom:
    """Stand-in generator that replays a fixed sequence from random()."""

    def __init__(self, values: list[float]):
        self._values = list(values)
        self._index = 0

    def random(self) -> float:
        value = self._values[self._index % len(self._values)]
        self._index += 1
        return value


def make_vessel(lat: float = 26.5, lng: float = -87.5, *,
                vessel_id: str = "vessel-0",
                heading: float = 0.0,
                speed: float = 5.0,
                behavior: Behavior = Behavior.NORMAL,
                vessel_type: VesselType = VesselType.CARGO,
                ais_status: AisStatus = AisStatus.ACTIVE,
                time_near_cable: float = 0.0,
                speed_history: list[float] | None = None,
                position_history: list[Position] | None = None) -> Vessel:
    """Helper to create a Vessel at a chosen position."""
    position = Position(lat, lng)
    return Vessel(
        id=vessel_id,
        name="Test Runner",
        mmsi="123456789",
        imo="9123456",
        flag="PA",
        vessel_type=vessel_type,
        position=position,
        heading=heading,
        speed=speed,
        initial_position=position,
        initial_heading=heading,
        initial_speed=speed,
        destination="Rotterdam",
        ais_status=ais_status,
        behavior=behavior,
        time_near_cable=time_near_cable,
        speed_history=[speed] if speed_history is None else speed_history,
        position_history=[position] if position_history is None else position_history,
    )


def zigzag_positions(n: int = 10, start_lat: float = 25.0,
                     start_lng: float = -86.0, step: float = 0.01) -> list[Position]:
    """Positions alternating north-east / north-west, turning 90 degrees each leg."""
    return [
        Position(start_lat + i * step, start_lng + (step if i % 2 else 0.0))
        for i in range(n)
    ]
