"""Shared data models for the maritime simulation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class VesselType(str, Enum):
    CARGO = "CARGO"
    TANKER = "TANKER"
    PASSENGER = "PASSENGER"
    FISHING = "FISHING"
    RESEARCH = "RESEARCH"
    MILITARY = "MILITARY"
    PLEASURE = "PLEASURE"
    TUG = "TUG"


class AisStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class Behavior(str, Enum):
    NORMAL = "NORMAL"
    ROUTE_DEVIATION = "ROUTE_DEVIATION"
    SPEED_ANOMALY = "SPEED_ANOMALY"
    AIS_LOSS = "AIS_LOSS"
    SUSPICIOUS_ANCHORING = "SUSPICIOUS_ANCHORING"


class CableStatus(str, Enum):
    NORMAL = "NORMAL"
    AT_RISK = "AT_RISK"
    DAMAGED = "DAMAGED"


class AnomalyType(str, Enum):
    AIS_LOSS = "AIS_LOSS"
    ROUTE_DEVIATION = "ROUTE_DEVIATION"
    SUSPICIOUS_ANCHORING = "SUSPICIOUS_ANCHORING"
    SPEED_ANOMALY = "SPEED_ANOMALY"
    RF_EMISSIONS = "RF_EMISSIONS"
    TYPE_MISMATCH = "TYPE_MISMATCH"


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class SimulationStatus(str, Enum):
    IDLE = "IDLE"           # no scenario yet
    READY = "READY"
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    COMPLETE = "COMPLETE"


@dataclass(frozen=True)
class Position:
    lat: float
    lng: float

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass
class Vessel:
    """A tracked vessel with its kinematics, hidden behavior and history."""
    id: str
    name: str
    mmsi: str
    imo: str
    flag: str
    vessel_type: VesselType
    position: Position
    heading: float            # degrees, [0, 360)
    speed: float              # knots
    initial_position: Position
    initial_heading: float
    initial_speed: float
    destination: str = ""
    ais_status: AisStatus = AisStatus.ACTIVE
    behavior: Behavior = Behavior.NORMAL
    time_near_cable: float = 0.0   # seconds
    speed_history: list[float] = field(default_factory=list)
    position_history: list[Position] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "mmsi": self.mmsi,
            "imo": self.imo,
            "flag": self.flag,
            "type": self.vessel_type.value,
            "position": self.position.to_dict(),
            "heading": self.heading,
            "speed": self.speed,
            "destination": self.destination,
            "ais_status": self.ais_status.value,
            "behavior": self.behavior.value,
            "time_near_cable": self.time_near_cable,
            "speed_history": list(self.speed_history),
            "position_history": [p.to_dict() for p in self.position_history],
        }


@dataclass(frozen=True)
class Cable:
    """An undersea cable as a polyline of waypoints."""
    id: str
    name: str
    path: tuple[Position, ...]
    status: CableStatus = CableStatus.NORMAL

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "path": [p.to_dict() for p in self.path],
            "status": self.status.value,
        }


@dataclass(frozen=True)
class Platform:
    id: str
    name: str
    position: Position
    platform_type: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "position": self.position.to_dict(),
            "type": self.platform_type,
        }


@dataclass(frozen=True)
class Infrastructure:
    cables: tuple[Cable, ...] = ()
    platforms: tuple[Platform, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "cables": [c.to_dict() for c in self.cables],
            "platforms": [p.to_dict() for p in self.platforms],
        }


@dataclass(frozen=True)
class NearestCable:
    """Result of a nearest-cable lookup."""
    cable: Cable
    distance: float


@dataclass
class Anomaly:
    """A classifier finding for one vessel at one instant."""
    anomaly_id: str
    anomaly_type: AnomalyType
    vessel_id: str
    vessel_name: str
    description: str
    severity: Severity
    timestamp: float          # wall clock, seconds since epoch
    position: Position
    near_infrastructure: Optional[str] = None
    distance_to_infrastructure: Optional[float] = None
    duration: Optional[float] = None

    @property
    def key(self) -> tuple[str, AnomalyType]:
        """Identity of the ongoing condition, used for event dedup."""
        return (self.vessel_id, self.anomaly_type)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.anomaly_id,
            "type": self.anomaly_type.value,
            "vessel_id": self.vessel_id,
            "vessel_name": self.vessel_name,
            "description": self.description,
            "severity": self.severity.value,
            "timestamp": self.timestamp,
            "position": self.position.to_dict(),
            "near_infrastructure": self.near_infrastructure,
            "distance_to_infrastructure": self.distance_to_infrastructure,
            "duration": self.duration,
        }


@dataclass
class SimulationEvent:
    """Log entry for a newly detected anomaly."""
    event_id: Optional[int] = None
    anomaly_id: str = ""
    timestamp: float = 0.0    # simulation clock, seconds
    event_type: AnomalyType = AnomalyType.AIS_LOSS
    description: str = ""
    severity: Severity = Severity.LOW
    vessel_id: Optional[str] = None
    vessel_name: Optional[str] = None
    position: Optional[Position] = None
    near_infrastructure: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "anomaly_id": self.anomaly_id,
            "timestamp": self.timestamp,
            "type": self.event_type.value,
            "description": self.description,
            "severity": self.severity.value,
            "vessel_id": self.vessel_id,
            "vessel_name": self.vessel_name,
            "position": self.position.to_dict() if self.position else None,
            "near_infrastructure": self.near_infrastructure,
        }


@dataclass
class SimulationState:
    """Aggregate root owned by the simulation controller."""
    vessels: list[Vessel] = field(default_factory=list)
    infrastructure: Infrastructure = field(default_factory=Infrastructure)
    events: list[SimulationEvent] = field(default_factory=list)
    time_elapsed: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "vessels": [v.to_dict() for v in self.vessels],
            "infrastructure": self.infrastructure.to_dict(),
            "events": [e.to_dict() for e in self.events],
            "time_elapsed": self.time_elapsed,
        }
