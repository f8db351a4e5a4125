"""YAML configuration loader with dataclass mapping."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class SimulationConfig:
    duration: float = 30.0          # simulated seconds per scenario
    tick_interval: float = 2.0      # seconds between ticks
    vessel_count: int = 15
    seed: int | None = None
    enhanced_detection: bool = True


@dataclass
class WorldConfig:
    lat_min: float = 25.5
    lat_max: float = 27.0
    lng_min: float = -88.0
    lng_max: float = -85.0
    initial_speed_min: float = 5.0
    initial_speed_max: float = 10.0
    behavior_weights: dict[str, float] = field(default_factory=lambda: {
        "NORMAL": 0.40,
        "ROUTE_DEVIATION": 0.15,
        "SPEED_ANOMALY": 0.15,
        "AIS_LOSS": 0.15,
        "SUSPICIOUS_ANCHORING": 0.15,
    })


@dataclass
class MotionConfig:
    movement_factor: float = 0.005  # degrees per knot per tick
    max_speed: float = 10.0
    history_length: int = 20
    heading_jitter: float = 10.0    # full span, degrees
    speed_jitter: float = 0.5       # full span, knots
    deviation_probability: float = 0.3
    deviation_turn: float = 90.0    # full span, degrees
    speed_change_probability: float = 0.3
    speed_increase_factor: float = 3.0
    speed_decrease_factor: float = 0.2
    ais_off_probability: float = 0.2
    ais_on_probability: float = 0.1
    anchoring_radius: float = 0.01
    anchoring_deceleration: float = 0.5


@dataclass
class DetectionConfig:
    directly_over_distance: float = 0.01
    very_close_distance: float = 0.02
    near_distance: float = 0.05
    anchored_speed: float = 0.5
    loitering_speed: float = 2.0
    anchoring_duration: float = 5.0
    speed_window: int = 5
    speed_range_threshold: float = 5.0
    zigzag_window: int = 10
    rf_probability: float = 0.05


@dataclass
class WebConfig:
    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class LoggingConfig:
    log_dir: str = "data/logs"
    level: str = "INFO"


@dataclass
class AppConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    world: WorldConfig = field(default_factory=WorldConfig)
    motion: MotionConfig = field(default_factory=MotionConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    web: WebConfig = field(default_factory=WebConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _apply_dict(dc: object, data: dict) -> None:
    """Apply dictionary values onto a dataclass instance, ignoring unknown keys."""
    for key, value in data.items():
        if hasattr(dc, key):
            setattr(dc, key, value)


def validate_config(config: AppConfig) -> None:
    """Raise ValueError for settings the simulation cannot run with."""
    sim = config.simulation
    if sim.tick_interval <= 0:
        raise ValueError(f"tick_interval must be positive, got {sim.tick_interval}")
    if sim.duration <= 0:
        raise ValueError(f"duration must be positive, got {sim.duration}")
    if sim.vessel_count < 0:
        raise ValueError(f"vessel_count must be >= 0, got {sim.vessel_count}")

    weights = config.world.behavior_weights
    if any(w < 0 for w in weights.values()) or sum(weights.values()) <= 0:
        raise ValueError(f"behavior_weights must be non-negative with a positive sum: {weights}")

    if config.motion.history_length < 1:
        raise ValueError("history_length must be at least 1")
    if config.world.initial_speed_min > config.world.initial_speed_max:
        raise ValueError("initial_speed_min exceeds initial_speed_max")


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load configuration from a YAML file, falling back to defaults."""
    config = AppConfig()

    if path is None:
        path = os.environ.get("CONFIG_PATH", "config/default.yaml")

    path = Path(path)
    if path.exists():
        with open(path, "r") as f:
            raw = yaml.safe_load(f) or {}

        section_map = {
            "simulation": config.simulation,
            "world": config.world,
            "motion": config.motion,
            "detection": config.detection,
            "web": config.web,
            "logging": config.logging,
        }

        for section_name, dc_instance in section_map.items():
            if section_name in raw and isinstance(raw[section_name], dict):
                _apply_dict(dc_instance, raw[section_name])

    # Environment variable overrides
    env_seed = os.environ.get("SIM_SEED")
    if env_seed:
        config.simulation.seed = int(env_seed)

    env_host = os.environ.get("WEB_HOST")
    if env_host:
        config.web.host = env_host

    env_port = os.environ.get("WEB_PORT")
    if env_port:
        config.web.port = int(env_port)

    try:
        validate_config(config)
    except TypeError as exc:
        raise ValueError(f"Invalid value type in {path}: {exc}") from exc
    return config
