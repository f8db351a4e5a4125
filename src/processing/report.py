"""Scenario summaries and weighted risk scores for vessels and cables."""

from __future__ import annotations

import math
from collections import Counter
from typing import Any

from src.processing.geometry import distance_to_cable
from src.recording.models import (
    Anomaly,
    AnomalyType,
    Behavior,
    Infrastructure,
    Severity,
    SimulationEvent,
    Vessel,
)

SEVERITY_WEIGHTS = {
    Severity.HIGH: 10,
    Severity.MEDIUM: 5,
    Severity.LOW: 2,
}


def risk_level(score: int) -> str:
    if score >= 10:
        return "HIGH"
    if score >= 5:
        return "MEDIUM"
    if score > 0:
        return "LOW"
    return "NONE"


def _severity_counts(anomalies: list[Anomaly]) -> dict[Severity, int]:
    counts = Counter(a.severity for a in anomalies)
    return {s: counts.get(s, 0) for s in Severity}


def _score(counts: dict[Severity, int]) -> int:
    return sum(SEVERITY_WEIGHTS[s] * n for s, n in counts.items())


def summarize(vessels: list[Vessel], anomalies: list[Anomaly]) -> dict[str, Any]:
    """Totals by anomaly type, severity and hidden behavior."""
    by_type = Counter(a.anomaly_type for a in anomalies)
    by_severity = Counter(a.severity for a in anomalies)
    by_behavior = Counter(v.behavior for v in vessels)
    total_vessels = len(vessels)
    rate = (len(anomalies) / total_vessels) * 100 if total_vessels else 0.0
    return {
        "total_vessels": total_vessels,
        "total_anomalies": len(anomalies),
        "anomaly_rate": round(rate, 1),
        "by_type": {t.value: by_type.get(t, 0) for t in AnomalyType},
        "by_severity": {s.value: by_severity.get(s, 0) for s in Severity},
        "by_behavior": {b.value: by_behavior.get(b, 0) for b in Behavior},
    }


def vessel_risk_scores(vessels: list[Vessel],
                       anomalies: list[Anomaly]) -> list[dict[str, Any]]:
    """Per-vessel weighted risk, highest first."""
    rows = []
    for vessel in vessels:
        own = [a for a in anomalies if a.vessel_id == vessel.id]
        counts = _severity_counts(own)
        score = _score(counts)
        rows.append({
            "id": vessel.id,
            "name": vessel.name,
            "imo": vessel.imo,
            "flag": vessel.flag,
            "type": vessel.vessel_type.value,
            "behavior": vessel.behavior.value,
            "risk_score": score,
            "risk_level": risk_level(score),
            "anomaly_count": len(own),
            "high": counts[Severity.HIGH],
            "medium": counts[Severity.MEDIUM],
            "low": counts[Severity.LOW],
        })
    rows.sort(key=lambda r: r["risk_score"], reverse=True)
    return rows


def cable_risk_scores(infrastructure: Infrastructure, anomalies: list[Anomaly],
                      radius: float = 0.05) -> list[dict[str, Any]]:
    """Per-cable weighted risk from anomalies recorded within `radius` of it."""
    rows = []
    for cable in infrastructure.cables:
        nearby = [a for a in anomalies
                  if distance_to_cable(a.position, cable) < radius]
        counts = _severity_counts(nearby)
        score = _score(counts)
        rows.append({
            "id": cable.id,
            "name": cable.name,
            "status": cable.status.value,
            "risk_score": score,
            "risk_level": risk_level(score),
            "anomaly_count": len(nearby),
            "high": counts[Severity.HIGH],
            "medium": counts[Severity.MEDIUM],
            "low": counts[Severity.LOW],
        })
    rows.sort(key=lambda r: r["risk_score"], reverse=True)
    return rows


def anomaly_timeline(events: list[SimulationEvent], interval: float,
                     duration: float) -> list[dict[str, Any]]:
    """Count events per tick bucket, broken down by type."""
    buckets = max(1, math.ceil(round(duration / interval, 9)))
    timeline = [
        {"time": round((i + 1) * interval, 3), **{t.value: 0 for t in AnomalyType}}
        for i in range(buckets)
    ]
    for event in events:
        # Event at time t belongs to the tick that ended at t
        index = math.ceil(round(event.timestamp / interval, 9)) - 1
        index = min(buckets - 1, max(0, index))
        timeline[index][event.event_type.value] += 1
    return timeline
