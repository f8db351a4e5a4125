"""Tick engine: advances vessel kinematics and behavior state one time step."""

from __future__ import annotations

import math
from dataclasses import replace

import numpy as np

from src.config import MotionConfig
from src.processing.geometry import find_nearest_cable, normalize_heading
from src.recording.models import (
    AisStatus,
    Behavior,
    Infrastructure,
    Position,
    Vessel,
)


class TickEngine:
    """Applies one simulation step to a vessel list.

    The engine holds no world state; every call maps input vessels to new
    Vessel instances. The only side effect is drawing from the injected
    random generator, so a seeded generator makes steps replayable.
    """

    def __init__(self, config: MotionConfig, rng: np.random.Generator):
        self._cfg = config
        self._rng = rng

    def step(self, vessels: list[Vessel], infrastructure: Infrastructure,
             dt: float) -> list[Vessel]:
        """Return the vessels advanced by `dt` seconds."""
        return [self._advance(v, infrastructure, dt) for v in vessels]

    def _advance(self, vessel: Vessel, infrastructure: Infrastructure,
                 dt: float) -> Vessel:
        cfg = self._cfg

        # Planar dead reckoning from the current heading/speed
        rad = math.radians(vessel.heading)
        distance = cfg.movement_factor * vessel.speed
        position = Position(
            lat=vessel.position.lat + math.cos(rad) * distance,
            lng=vessel.position.lng + math.sin(rad) * distance,
        )

        heading = vessel.heading
        speed = vessel.speed
        ais_status = vessel.ais_status
        time_near_cable = vessel.time_near_cable

        behavior = vessel.behavior
        if behavior == Behavior.NORMAL:
            heading, speed = self._jitter(heading, speed)

        elif behavior == Behavior.ROUTE_DEVIATION:
            if self._rng.random() < cfg.deviation_probability:
                heading += (self._rng.random() - 0.5) * cfg.deviation_turn

        elif behavior == Behavior.SPEED_ANOMALY:
            if self._rng.random() < cfg.speed_change_probability:
                if self._rng.random() < 0.5:
                    speed *= cfg.speed_increase_factor
                else:
                    speed *= cfg.speed_decrease_factor

        elif behavior == Behavior.AIS_LOSS:
            roll = self._rng.random()
            if ais_status == AisStatus.ACTIVE and roll < cfg.ais_off_probability:
                ais_status = AisStatus.INACTIVE
            elif ais_status == AisStatus.INACTIVE and roll < cfg.ais_on_probability:
                ais_status = AisStatus.ACTIVE

        elif behavior == Behavior.SUSPICIOUS_ANCHORING:
            nearest = find_nearest_cable(position, infrastructure.cables)
            if nearest is not None and nearest.distance < cfg.anchoring_radius:
                speed = max(0.0, speed - cfg.anchoring_deceleration)
                time_near_cable += dt
            else:
                heading, speed = self._jitter(heading, speed)

        speed = min(cfg.max_speed, max(0.0, speed))
        heading = normalize_heading(heading)

        limit = cfg.history_length
        return replace(
            vessel,
            position=position,
            heading=heading,
            speed=speed,
            ais_status=ais_status,
            time_near_cable=time_near_cable,
            speed_history=(vessel.speed_history + [speed])[-limit:],
            position_history=(vessel.position_history + [position])[-limit:],
        )

    def _jitter(self, heading: float, speed: float) -> tuple[float, float]:
        heading += (self._rng.random() - 0.5) * self._cfg.heading_jitter
        speed += (self._rng.random() - 0.5) * self._cfg.speed_jitter
        return heading, speed
