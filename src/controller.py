"""Simulation controller: world state, run state machine, tick timer."""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import replace
from typing import Any, Callable

import numpy as np

from src.config import AppConfig
from src.processing.classifier import AnomalyClassifier
from src.processing.engine import TickEngine
from src.processing.report import (
    anomaly_timeline,
    cable_risk_scores,
    summarize,
    vessel_risk_scores,
)
from src.processing.world import WorldGenerator
from src.recording.event_log import EventLog
from src.recording.models import (
    AisStatus,
    Anomaly,
    Infrastructure,
    SimulationEvent,
    SimulationState,
    SimulationStatus,
    Vessel,
)

logger = logging.getLogger(__name__)


class SimulationController:
    """Owns the scenario and drives tick engine -> classifier -> event log.

    All mutation happens under one lock; readers receive snapshots. With
    ``use_timer=False`` nothing runs in the background and the caller
    drives the simulation through ``tick()``.
    """

    def __init__(self, config: AppConfig, rng: np.random.Generator | None = None,
                 use_timer: bool = True):
        self._config = config
        self._rng = rng if rng is not None else np.random.default_rng(config.simulation.seed)
        self._use_timer = use_timer

        # Components
        self._generator = WorldGenerator(config.world, self._rng,
                                         max_speed=config.motion.max_speed)
        self._engine = TickEngine(config.motion, self._rng)
        self._classifier = AnomalyClassifier(
            config.detection, self._rng,
            enhanced=config.simulation.enhanced_detection,
        )
        self._event_log = EventLog()

        # World state
        self._lock = threading.RLock()
        self._status = SimulationStatus.IDLE
        self._vessels: list[Vessel] = []
        self._infrastructure = Infrastructure()
        self._tick_count = 0
        self._time_elapsed = 0.0
        self._selected_vessel_id: str | None = None

        # Timer
        self._timer_thread: threading.Thread | None = None
        self._timer_stop: threading.Event | None = None

        # Event subscribers (for WebSocket push)
        self._event_callbacks: list[Callable] = []
        self._loop: asyncio.AbstractEventLoop | None = None

    # --- read accessors ---

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    @property
    def duration(self) -> float:
        return self._config.simulation.duration

    @property
    def tick_interval(self) -> float:
        return self._config.simulation.tick_interval

    @property
    def vessel_count(self) -> int:
        return self._config.simulation.vessel_count

    @property
    def status(self) -> SimulationStatus:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._status == SimulationStatus.RUNNING

    @property
    def is_complete(self) -> bool:
        return self._status == SimulationStatus.COMPLETE

    @property
    def time_elapsed(self) -> float:
        return self._time_elapsed

    @property
    def selected_vessel_id(self) -> str | None:
        return self._selected_vessel_id

    @property
    def state(self) -> SimulationState:
        """Snapshot of the world. Vessels are replaced, never mutated, per tick."""
        with self._lock:
            return SimulationState(
                vessels=list(self._vessels),
                infrastructure=self._infrastructure,
                events=self._event_log.events,
                time_elapsed=self._time_elapsed,
            )

    @property
    def anomalies(self) -> list[Anomaly]:
        with self._lock:
            return self._event_log.anomalies

    def get_vessel(self, vessel_id: str) -> Vessel | None:
        with self._lock:
            for vessel in self._vessels:
                if vessel.id == vessel_id:
                    return vessel
        return None

    @property
    def stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "status": self._status.value,
                "running": self.is_running,
                "complete": self.is_complete,
                "time_elapsed": self._time_elapsed,
                "duration": self.duration,
                "tick_interval": self.tick_interval,
                "ticks": self._tick_count,
                "vessels": len(self._vessels),
                "anomalies": len(self._event_log.anomalies),
                "events": len(self._event_log.events),
                "selected_vessel_id": self._selected_vessel_id,
            }

    def report(self) -> dict[str, Any]:
        """Summary, risk tables and timeline for the current scenario."""
        with self._lock:
            vessels = list(self._vessels)
            anomalies = self._event_log.anomalies
            events = self._event_log.events
            infrastructure = self._infrastructure
        return {
            "summary": summarize(vessels, anomalies),
            "vessel_risk": vessel_risk_scores(vessels, anomalies),
            "cable_risk": cable_risk_scores(
                infrastructure, anomalies,
                radius=self._config.detection.near_distance,
            ),
            "timeline": anomaly_timeline(events, self.tick_interval, self.duration),
        }

    # --- subscribers ---

    def set_event_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Set the asyncio event loop for thread-safe callbacks."""
        self._loop = loop

    def add_event_callback(self, callback: Callable) -> None:
        """Register a callback for new events and status changes."""
        self._event_callbacks.append(callback)

    # --- commands ---

    def generate_new_scenario(self) -> None:
        """Discard the current scenario and generate fresh vessels."""
        with self._lock:
            self._stop_timer()
            self._vessels = self._generator.generate_vessels(self.vessel_count)
            self._infrastructure = self._generator.generate_infrastructure()
            self._clear_progress()
            self._status = SimulationStatus.READY
        logger.info("Generated new scenario with %d vessels", len(self._vessels))
        self._publish_status()

    def start(self) -> None:
        """Start or resume the simulation."""
        with self._lock:
            if self._status == SimulationStatus.RUNNING:
                return
            if not self._vessels:
                logger.info("No vessels found, generating new scenario before starting")
                self._vessels = self._generator.generate_vessels(self.vessel_count)
                self._infrastructure = self._generator.generate_infrastructure()
                self._clear_progress()
            if self._status == SimulationStatus.COMPLETE:
                self._reset_vessels()
                self._clear_progress()
            self._status = SimulationStatus.RUNNING
            self._start_timer()
        logger.info("Simulation started at t=%.1fs", self._time_elapsed)
        self._publish_status()

    def pause(self) -> None:
        with self._lock:
            if self._status != SimulationStatus.RUNNING:
                return
            self._stop_timer()
            self._status = SimulationStatus.PAUSED
        logger.info("Simulation paused at t=%.1fs", self._time_elapsed)
        self._publish_status()

    def reset(self) -> None:
        """Restore vessels to their initial snapshots and clear all logs."""
        with self._lock:
            self._stop_timer()
            self._reset_vessels()
            self._clear_progress()
            self._status = SimulationStatus.READY
        logger.info("Simulation reset")
        self._publish_status()

    def select_vessel(self, vessel_id: str | None) -> None:
        """Set the UI selection. Has no effect on the simulation."""
        if vessel_id is not None and self.get_vessel(vessel_id) is None:
            logger.debug("Selected unknown vessel id %s", vessel_id)
        self._selected_vessel_id = vessel_id

    def tick(self) -> bool:
        """Advance one interval. Returns False when not running."""
        return self._advance(None)

    def _timer_tick(self, stop: threading.Event) -> bool:
        """Tick on behalf of the timer thread that owns `stop`."""
        return self._advance(stop)

    def _advance(self, stop: threading.Event | None) -> bool:
        completed = False
        with self._lock:
            # A timer thread stopped by pause/reset/restart must not tick
            if stop is not None and (stop.is_set() or stop is not self._timer_stop):
                return False
            if self._status != SimulationStatus.RUNNING:
                return False

            self._tick_count += 1
            elapsed = round(self._tick_count * self.tick_interval, 9)

            if elapsed >= self.duration:
                self._time_elapsed = self.duration
                self._status = SimulationStatus.COMPLETE
                self._stop_timer()
                new_events: list[SimulationEvent] = []
                completed = True
            else:
                self._vessels = self._engine.step(
                    self._vessels, self._infrastructure, self.tick_interval)
                anomalies = self._classifier.classify(self._vessels, self._infrastructure)
                new_events = self._event_log.ingest(anomalies, elapsed, self._vessels)
                self._time_elapsed = elapsed

        for event in new_events:
            self._publish({"type": "event", "event": event.to_dict()})
        if completed:
            logger.info("Simulation complete after %d ticks", self._tick_count)
            self._publish_status()
        return True

    def shutdown(self) -> None:
        """Stop the timer thread and wait for it to exit."""
        with self._lock:
            thread = self._timer_thread
            self._stop_timer()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.tick_interval + 1.0)
        logger.info("Simulation controller stopped")

    # --- internals ---

    def _clear_progress(self) -> None:
        self._event_log.clear_all()
        self._tick_count = 0
        self._time_elapsed = 0.0

    def _reset_vessels(self) -> None:
        self._vessels = [
            replace(
                v,
                position=v.initial_position,
                heading=v.initial_heading,
                speed=v.initial_speed,
                ais_status=AisStatus.ACTIVE,
                time_near_cable=0.0,
                speed_history=[v.initial_speed],
                position_history=[v.initial_position],
            )
            for v in self._vessels
        ]

    def _start_timer(self) -> None:
        if not self._use_timer:
            return
        stop = threading.Event()
        self._timer_stop = stop
        self._timer_thread = threading.Thread(
            target=self._run_loop, args=(stop,), daemon=True)
        self._timer_thread.start()

    def _stop_timer(self) -> None:
        if self._timer_stop is not None:
            self._timer_stop.set()
        self._timer_stop = None
        self._timer_thread = None

    def _run_loop(self, stop: threading.Event) -> None:
        """Timer loop running in a background thread."""
        while not stop.wait(self.tick_interval):
            try:
                if not self._timer_tick(stop):
                    break
            except Exception:
                logger.exception("Simulation tick failed")
                break

    def _publish_status(self) -> None:
        self._publish({"type": "status", "stats": self.stats})

    def _publish(self, data: dict) -> None:
        for callback in self._event_callbacks:
            try:
                if self._loop is not None:
                    self._loop.call_soon_threadsafe(callback, data)
                else:
                    callback(data)
            except Exception:
                logger.exception("Error in event callback")
