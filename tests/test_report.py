"""Tests for scenario summaries and risk scoring."""

from __future__ import annotations

from src.processing.report import (
    anomaly_timeline,
    cable_risk_scores,
    risk_level,
    summarize,
    vessel_risk_scores,
)
from src.recording.models import (
    Anomaly,
    AnomalyType,
    Behavior,
    Infrastructure,
    Position,
    Severity,
    SimulationEvent,
)
from tests.conftest import make_vessel


def make_anomaly(vessel_id: str, severity: Severity,
                 anomaly_type: AnomalyType = AnomalyType.AIS_LOSS,
                 position: Position = Position(25.0, -86.0)) -> Anomaly:
    return Anomaly(
        anomaly_id=f"anomaly-{vessel_id}-{anomaly_type.value}",
        anomaly_type=anomaly_type,
        vessel_id=vessel_id,
        vessel_name=vessel_id,
        description="",
        severity=severity,
        timestamp=0.0,
        position=position,
    )


class TestRiskLevel:
    def test_thresholds(self):
        """Scores map to NONE, LOW, MEDIUM and HIGH bands."""
        assert risk_level(0) == "NONE"
        assert risk_level(2) == "LOW"
        assert risk_level(5) == "MEDIUM"
        assert risk_level(9) == "MEDIUM"
        assert risk_level(10) == "HIGH"


class TestSummaries:
    def test_summarize_counts(self):
        """Summary counts anomalies by type, severity and hidden behavior."""
        vessels = [make_vessel(vessel_id="a"),
                   make_vessel(vessel_id="b", behavior=Behavior.AIS_LOSS)]
        anomalies = [
            make_anomaly("a", Severity.HIGH),
            make_anomaly("a", Severity.MEDIUM, AnomalyType.SPEED_ANOMALY),
            make_anomaly("b", Severity.LOW, AnomalyType.RF_EMISSIONS),
        ]
        summary = summarize(vessels, anomalies)
        assert summary["total_vessels"] == 2
        assert summary["total_anomalies"] == 3
        assert summary["anomaly_rate"] == 150.0
        assert summary["by_type"]["AIS_LOSS"] == 1
        assert summary["by_type"]["TYPE_MISMATCH"] == 0
        assert summary["by_severity"] == {"LOW": 1, "MEDIUM": 1, "HIGH": 1}
        assert summary["by_behavior"]["AIS_LOSS"] == 1
        assert summary["by_behavior"]["NORMAL"] == 1

    def test_summarize_empty(self):
        """An empty scenario has a zero anomaly rate."""
        summary = summarize([], [])
        assert summary["anomaly_rate"] == 0.0
        assert summary["total_anomalies"] == 0

    def test_vessel_risk_sorted(self):
        """Vessels are scored by severity weight and sorted riskiest first."""
        vessels = [make_vessel(vessel_id="calm"), make_vessel(vessel_id="risky")]
        anomalies = [
            make_anomaly("risky", Severity.HIGH),
            make_anomaly("risky", Severity.LOW, AnomalyType.SPEED_ANOMALY),
        ]
        rows = vessel_risk_scores(vessels, anomalies)
        assert [r["id"] for r in rows] == ["risky", "calm"]
        assert rows[0]["risk_score"] == 12
        assert rows[0]["risk_level"] == "HIGH"
        assert rows[0]["anomaly_count"] == 2
        assert rows[1]["risk_level"] == "NONE"

    def test_cable_risk_uses_anomaly_position(self, straight_cable):
        """Only anomalies recorded within the radius count against a cable."""
        infra = Infrastructure(cables=(straight_cable,))
        anomalies = [
            make_anomaly("a", Severity.MEDIUM, position=Position(26.02, -87.5)),
            make_anomaly("b", Severity.HIGH, position=Position(26.5, -87.5)),
        ]
        rows = cable_risk_scores(infra, anomalies, radius=0.05)
        assert len(rows) == 1
        assert rows[0]["anomaly_count"] == 1
        assert rows[0]["risk_score"] == 5
        assert rows[0]["risk_level"] == "MEDIUM"


class TestTimeline:
    def test_events_bucketed_by_tick(self):
        """Events land in the bucket of the tick that produced them."""
        events = [
            SimulationEvent(timestamp=2.0, event_type=AnomalyType.AIS_LOSS),
            SimulationEvent(timestamp=2.0, event_type=AnomalyType.SPEED_ANOMALY),
            SimulationEvent(timestamp=6.0, event_type=AnomalyType.AIS_LOSS),
        ]
        timeline = anomaly_timeline(events, interval=2.0, duration=30.0)
        assert len(timeline) == 15
        assert timeline[0]["time"] == 2.0
        assert timeline[0]["AIS_LOSS"] == 1
        assert timeline[0]["SPEED_ANOMALY"] == 1
        assert timeline[2]["AIS_LOSS"] == 1
        assert sum(row["AIS_LOSS"] for row in timeline) == 2

    def test_inexact_interval_buckets(self):
        """A 0.1s interval still places the 11th tick's event in bucket 10."""
        events = [SimulationEvent(timestamp=1.1, event_type=AnomalyType.AIS_LOSS)]
        timeline = anomaly_timeline(events, interval=0.1, duration=1.5)
        assert len(timeline) == 15
        assert timeline[10]["AIS_LOSS"] == 1
        assert sum(row["AIS_LOSS"] for row in timeline) == 1
