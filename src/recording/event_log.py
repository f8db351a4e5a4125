"""In-memory anomaly/event log with per-(vessel, type) deduplication."""

from __future__ import annotations

import logging
from collections import Counter

from src.recording.models import (
    Anomaly,
    AnomalyType,
    SimulationEvent,
    Vessel,
)

logger = logging.getLogger(__name__)


class EventLog:
    """Turns per-tick classifier output into an append-only event log.

    A (vessel, type) key is "open" while its condition is reported on
    consecutive ingests. Only the tick that opens a key produces an
    anomaly record and an event; a key closes when a tick no longer
    reports it, and may open again later.
    """

    def __init__(self):
        self._anomalies: list[Anomaly] = []
        self._events: list[SimulationEvent] = []
        self._open_keys: set[tuple[str, AnomalyType]] = set()
        self._next_id = 1

    @property
    def anomalies(self) -> list[Anomaly]:
        """Anomalies that opened a new event, oldest first."""
        return list(self._anomalies)

    @property
    def events(self) -> list[SimulationEvent]:
        return list(self._events)

    @property
    def open_keys(self) -> set[tuple[str, AnomalyType]]:
        return set(self._open_keys)

    def ingest(self, anomalies: list[Anomaly], sim_time: float,
               vessels: list[Vessel] | None = None) -> list[SimulationEvent]:
        """Record newly opened anomalies and return the events they create."""
        positions = {v.id: v.position for v in vessels} if vessels else {}

        current: dict[tuple[str, AnomalyType], Anomaly] = {}
        for anomaly in anomalies:
            # First finding for a key wins within one tick
            current.setdefault(anomaly.key, anomaly)

        new_events: list[SimulationEvent] = []
        for key, anomaly in current.items():
            if key in self._open_keys:
                continue
            self._anomalies.append(anomaly)
            event = self.log_event(SimulationEvent(
                anomaly_id=anomaly.anomaly_id,
                timestamp=sim_time,
                event_type=anomaly.anomaly_type,
                description=anomaly.description,
                severity=anomaly.severity,
                vessel_id=anomaly.vessel_id,
                vessel_name=anomaly.vessel_name,
                position=positions.get(anomaly.vessel_id, anomaly.position),
                near_infrastructure=anomaly.near_infrastructure,
            ))
            new_events.append(event)

        closed = self._open_keys - current.keys()
        if closed:
            logger.debug("Closed %d anomaly conditions", len(closed))
        self._open_keys = set(current.keys())
        return new_events

    def log_event(self, event: SimulationEvent) -> SimulationEvent:
        """Append an event, assigning its id."""
        event.event_id = self._next_id
        self._next_id += 1
        self._events.append(event)
        logger.info("Logged event #%d (%s, vessel=%s, severity=%s)",
                    event.event_id, event.event_type.value, event.vessel_id,
                    event.severity.value)
        return event

    def get_recent(self, limit: int = 50) -> list[SimulationEvent]:
        """Get the most recent events, newest first."""
        if limit <= 0:
            return []
        return list(reversed(self._events[-limit:]))

    def get_by_type(self, event_type: AnomalyType,
                    limit: int = 50) -> list[SimulationEvent]:
        matches = [e for e in self._events if e.event_type == event_type]
        return list(reversed(matches[-limit:])) if limit > 0 else []

    def get_by_vessel(self, vessel_id: str) -> list[Anomaly]:
        return [a for a in self._anomalies if a.vessel_id == vessel_id]

    def get_stats(self) -> dict:
        """Get summary statistics."""
        by_type = Counter(e.event_type.value for e in self._events)
        by_severity = Counter(e.severity.value for e in self._events)
        return {
            "total": len(self._events),
            "open": len(self._open_keys),
            "by_type": dict(by_type),
            "by_severity": dict(by_severity),
        }

    def clear_all(self) -> int:
        """Drop all events, anomalies and open keys. Returns the event count removed."""
        count = len(self._events)
        self._anomalies.clear()
        self._events.clear()
        self._open_keys.clear()
        self._next_id = 1
        logger.info("Cleared %d events from history", count)
        return count
