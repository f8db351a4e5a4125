"""Rule-based anomaly classifier: AIS loss, anchoring, loitering, zigzag, speed."""

from __future__ import annotations

import time
from typing import Optional

import numpy as np

from src.config import DetectionConfig
from src.processing.geometry import detect_zigzag, find_nearest_cable
from src.recording.models import (
    AisStatus,
    Anomaly,
    AnomalyType,
    Behavior,
    Infrastructure,
    NearestCable,
    Severity,
    Vessel,
    VesselType,
)

_ID_PREFIX = {
    AnomalyType.AIS_LOSS: "ais",
    AnomalyType.SUSPICIOUS_ANCHORING: "anchoring",
    AnomalyType.ROUTE_DEVIATION: "route",
    AnomalyType.SPEED_ANOMALY: "speed",
    AnomalyType.TYPE_MISMATCH: "type",
    AnomalyType.RF_EMISSIONS: "rf",
}


class AnomalyClassifier:
    """Derives anomaly records from the current vessel and cable state.

    Every call classifies from scratch: an ongoing condition is reported
    again on each call. Turning repeated findings into events is the job
    of the event log.
    """

    def __init__(self, config: DetectionConfig,
                 rng: np.random.Generator | None = None,
                 enhanced: bool = True):
        self._cfg = config
        self._rng = rng if rng is not None else np.random.default_rng()
        self._enhanced = enhanced

    @property
    def enhanced(self) -> bool:
        return self._enhanced

    def classify(self, vessels: list[Vessel], infrastructure: Infrastructure,
                 timestamp: float | None = None) -> list[Anomaly]:
        """Return all anomalies that hold for the given vessels right now."""
        if timestamp is None:
            timestamp = time.time()

        anomalies: list[Anomaly] = []
        for vessel in vessels:
            nearest = find_nearest_cable(vessel.position, infrastructure.cables)
            anomalies.extend(self._classify_vessel(vessel, nearest, timestamp))
        return anomalies

    def _classify_vessel(self, vessel: Vessel, nearest: NearestCable | None,
                         timestamp: float) -> list[Anomaly]:
        cfg = self._cfg
        distance = nearest.distance if nearest is not None else float("inf")
        cable_name = nearest.cable.name if nearest is not None else None

        near = distance < cfg.near_distance
        very_close = distance < cfg.very_close_distance
        directly_over = distance < cfg.directly_over_distance

        found: list[Anomaly] = []

        def emit(anomaly_type: AnomalyType, severity: Severity, description: str,
                 with_cable: bool, duration: Optional[float] = None) -> None:
            found.append(Anomaly(
                anomaly_id=self._anomaly_id(anomaly_type, vessel.id, timestamp),
                anomaly_type=anomaly_type,
                vessel_id=vessel.id,
                vessel_name=vessel.name,
                description=description,
                severity=severity,
                timestamp=timestamp,
                position=vessel.position,
                near_infrastructure=cable_name if with_cable else None,
                distance_to_infrastructure=distance if with_cable else None,
                duration=duration,
            ))

        # --- AIS signal loss ---
        if vessel.ais_status == AisStatus.INACTIVE:
            if directly_over:
                description = (f"Vessel {vessel.name} (IMO: {vessel.imo}) disabled AIS "
                               f"directly above {cable_name} cable")
            elif very_close:
                description = (f"Vessel {vessel.name} (IMO: {vessel.imo}) disabled AIS "
                               f"very close to {cable_name} cable")
            elif near:
                description = (f"Vessel {vessel.name} (IMO: {vessel.imo}) disabled AIS "
                               f"near {cable_name} cable")
            else:
                description = f"Vessel {vessel.name} (IMO: {vessel.imo}) has lost AIS signal"
            severity = Severity.HIGH if very_close else Severity.MEDIUM
            emit(AnomalyType.AIS_LOSS, severity, description, with_cable=near)

        # --- Anchoring directly over a cable ---
        if (vessel.speed < cfg.anchored_speed and vessel.time_near_cable > 0
                and directly_over):
            severity = (Severity.HIGH if vessel.time_near_cable > cfg.anchoring_duration
                        else Severity.MEDIUM)
            emit(AnomalyType.SUSPICIOUS_ANCHORING, severity,
                 f"Vessel {vessel.name} (IMO: {vessel.imo}) anchored "
                 f"{vessel.time_near_cable:.1f} seconds above {cable_name} cable "
                 f"with no declared activity",
                 with_cable=True, duration=vessel.time_near_cable)

        # --- Loitering at low speed in a cable zone ---
        if (cfg.anchored_speed <= vessel.speed < cfg.loitering_speed
                and vessel.time_near_cable > 0 and near):
            emit(AnomalyType.ROUTE_DEVIATION,
                 Severity.HIGH if directly_over else Severity.MEDIUM,
                 f"Vessel {vessel.name} (IMO: {vessel.imo}) loitered near {cable_name} "
                 f"cable for {vessel.time_near_cable:.1f} seconds at "
                 f"{vessel.speed:.1f} knots",
                 with_cable=True, duration=vessel.time_near_cable)

        # --- Zigzag course ---
        window = cfg.zigzag_window
        if (len(vessel.position_history) >= window
                and detect_zigzag(vessel.position_history[-window:])):
            suffix = f" near {cable_name} cable" if near else ""
            emit(AnomalyType.ROUTE_DEVIATION,
                 Severity.HIGH if near else Severity.MEDIUM,
                 f"Vessel {vessel.name} (IMO: {vessel.imo}) is following an "
                 f"unusual zigzag pattern{suffix}",
                 with_cable=near)

        # --- Erratic speed ---
        speed_range = self._speed_range(vessel.speed_history)
        if (speed_range is not None and speed_range[1] - speed_range[0] > cfg.speed_range_threshold
                and vessel.behavior == Behavior.SPEED_ANOMALY):
            low, high = speed_range
            suffix = f" near {cable_name} cable" if near else ""
            emit(AnomalyType.SPEED_ANOMALY,
                 Severity.HIGH if near else Severity.MEDIUM,
                 f"Vessel {vessel.name} (IMO: {vessel.imo}) has shown unusual speed "
                 f"changes ({low:.1f} to {high:.1f} knots){suffix}",
                 with_cable=near)

        if not self._enhanced:
            return found

        # --- Research vessel in a cable zone without a permit ---
        if vessel.vessel_type == VesselType.RESEARCH and near:
            emit(AnomalyType.TYPE_MISMATCH,
                 Severity.HIGH if directly_over else Severity.MEDIUM,
                 f"Research vessel {vessel.name} (IMO: {vessel.imo}) with no research "
                 f"permit in restricted zone near {cable_name} cable",
                 with_cable=True)

        # --- Simulated RF emission intercepts ---
        if (vessel.behavior != Behavior.NORMAL and near
                and self._rng.random() < cfg.rf_probability):
            emit(AnomalyType.RF_EMISSIONS,
                 Severity.HIGH if directly_over else Severity.MEDIUM,
                 f"High-frequency RF signals detected from {vessel.name} "
                 f"(IMO: {vessel.imo}) near {cable_name} cable",
                 with_cable=True)

        return found

    def _speed_range(self, speed_history: list[float]) -> tuple[float, float] | None:
        """Return (min, max) over the recent speed window, or None if too short."""
        window = self._cfg.speed_window
        if len(speed_history) < window:
            return None
        recent = np.array(speed_history[-window:], dtype=np.float64)
        return float(recent.min()), float(recent.max())

    @staticmethod
    def _anomaly_id(anomaly_type: AnomalyType, vessel_id: str, timestamp: float) -> str:
        return f"anomaly-{_ID_PREFIX[anomaly_type]}-{vessel_id}-{int(timestamp * 1000)}"
