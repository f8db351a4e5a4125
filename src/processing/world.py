"""Scenario generation: randomized vessels and the fixed cable/platform layout."""

from __future__ import annotations

import logging

import numpy as np

from src.config import MotionConfig, WorldConfig
from src.recording.models import (
    Behavior,
    Cable,
    CableStatus,
    Infrastructure,
    Platform,
    Position,
    Vessel,
    VesselType,
)

logger = logging.getLogger(__name__)

VESSEL_NAMES = [
    "Atlantic Voyager", "Pacific Explorer", "Northern Star", "Southern Cross",
    "Ocean Pioneer", "Sea Dragon", "Coastal Runner", "Global Trader",
    "Horizon Seeker", "Maritime Venture", "Wave Rider", "Deep Blue",
    "Eastern Wind", "Western Sun", "Crystal Waters", "Golden Horizon",
    "Silver Mist", "Royal Odyssey", "Emerald Seas", "Diamond Crest",
]

FLAGS = [
    "US", "UK", "JP", "CN", "DE", "FR", "IT", "ES",
    "NL", "GR", "PA", "LR", "MH", "SG", "HK", "MT",
]

DESTINATIONS = [
    "New York", "Rotterdam", "Shanghai", "Singapore", "Los Angeles",
    "Hamburg", "Dubai", "Hong Kong", "Tokyo", "Busan", "Antwerp",
    "Valencia", "Felixstowe", "Santos", "Jebel Ali", "Kaohsiung",
]


def _path(*points: tuple[float, float]) -> tuple[Position, ...]:
    return tuple(Position(lat, lng) for lat, lng in points)


CABLES = (
    Cable(
        id="cable-1",
        name="Gulf Connector",
        path=_path((25.7, -89.5), (26.0, -88.8), (26.2, -87.9),
                   (26.3, -87.0), (26.4, -86.0)),
        status=CableStatus.NORMAL,
    ),
    Cable(
        id="cable-2",
        name="Southern Cross",
        path=_path((25.2, -89.0), (25.5, -88.5), (25.8, -88.0),
                   (26.1, -87.5), (26.4, -87.0)),
        status=CableStatus.NORMAL,
    ),
    Cable(
        id="cable-3",
        name="Atlantic Link",
        path=_path((26.0, -89.2), (26.2, -88.7), (26.4, -88.2),
                   (26.6, -87.7), (26.8, -87.2)),
        status=CableStatus.NORMAL,
    ),
)

PLATFORMS = (
    Platform(id="platform-1", name="Gulf Platform Alpha",
             position=Position(26.1, -88.5), platform_type="OIL"),
    Platform(id="platform-2", name="Research Station Beta",
             position=Position(25.8, -87.8), platform_type="RESEARCH"),
    Platform(id="platform-3", name="Monitoring Station Gamma",
             position=Position(26.5, -88.0), platform_type="MONITORING"),
)


class WorldGenerator:
    """Builds vessel populations from an injected random generator."""

    def __init__(self, config: WorldConfig, rng: np.random.Generator,
                 max_speed: float | None = None):
        self._cfg = config
        self._rng = rng
        self._max_speed = MotionConfig().max_speed if max_speed is None else max_speed

        behaviors = [Behavior(name) for name in config.behavior_weights]
        weights = np.array(list(config.behavior_weights.values()), dtype=np.float64)
        self._behaviors = behaviors
        self._behavior_p = weights / weights.sum()

        # Initial speeds never exceed what the tick engine allows
        self._speed_low = min(config.initial_speed_min, self._max_speed)
        self._speed_high = min(config.initial_speed_max, self._max_speed)
        if config.initial_speed_max > self._max_speed:
            logger.warning(
                "initial_speed_max %.1f exceeds max_speed %.1f; capping",
                config.initial_speed_max, self._max_speed,
            )

    def generate_vessels(self, count: int) -> list[Vessel]:
        vessels = [self._generate_vessel(i) for i in range(count)]
        logger.debug("Generated %d vessels", len(vessels))
        return vessels

    def generate_infrastructure(self) -> Infrastructure:
        return generate_infrastructure()

    def _pick(self, pool: list[str]) -> str:
        return pool[int(self._rng.integers(len(pool)))]

    def _generate_vessel(self, index: int) -> Vessel:
        rng = self._rng
        lat = float(rng.uniform(self._cfg.lat_min, self._cfg.lat_max))
        lng = float(rng.uniform(self._cfg.lng_min, self._cfg.lng_max))
        heading = float(rng.uniform(0.0, 360.0)) % 360.0
        speed = float(rng.uniform(self._speed_low, self._speed_high))

        behavior = self._behaviors[int(rng.choice(len(self._behaviors), p=self._behavior_p))]

        # Synthetic identifiers, no checksum validation
        imo = f"9{int(rng.integers(100000, 1000000))}"
        mmsi = str(int(rng.integers(100000000, 1000000000)))

        vessel_types = list(VesselType)
        position = Position(lat, lng)
        return Vessel(
            id=f"vessel-{index}",
            name=self._pick(VESSEL_NAMES),
            mmsi=mmsi,
            imo=imo,
            flag=self._pick(FLAGS),
            vessel_type=vessel_types[int(rng.integers(len(vessel_types)))],
            position=position,
            heading=heading,
            speed=speed,
            initial_position=position,
            initial_heading=heading,
            initial_speed=speed,
            destination=self._pick(DESTINATIONS),
            behavior=behavior,
            speed_history=[speed],
            position_history=[position],
        )


def generate_vessels(count: int, rng: np.random.Generator,
                     config: WorldConfig | None = None) -> list[Vessel]:
    """Generate `count` vessels with the default or given world config."""
    return WorldGenerator(config or WorldConfig(), rng).generate_vessels(count)


def generate_infrastructure() -> Infrastructure:
    """Return the fixed cable and platform layout."""
    return Infrastructure(cables=CABLES, platforms=PLATFORMS)
