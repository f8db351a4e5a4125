"""Tests for the dashboard HTTP API."""

from __future__ import annotations

import numpy as np
import pytest
from fastapi.testclient import TestClient

from src.controller import SimulationController
from src.web.app import create_app


@pytest.fixture
def controller(app_config) -> SimulationController:
    controller = SimulationController(app_config, rng=np.random.default_rng(5),
                                      use_timer=False)
    controller.generate_new_scenario()
    return controller


@pytest.fixture
def client(controller):
    with TestClient(create_app(controller)) as client:
        yield client


class TestRoutes:
    def test_state(self, client):
        """The state endpoint returns the READY scenario snapshot."""
        body = client.get("/api/state").json()
        assert body["status"] == "READY"
        assert len(body["vessels"]) == 15
        assert len(body["infrastructure"]["cables"]) == 3
        assert body["events"] == []
        assert body["time_elapsed"] == 0.0

    def test_config(self, client):
        """The config endpoint exposes the run constants."""
        body = client.get("/api/config").json()
        assert body["duration"] == 30.0
        assert body["tick_interval"] == 2.0
        assert body["vessel_count"] == 15

    def test_commands(self, client, controller):
        """Command endpoints drive the controller through its states."""
        body = client.post("/api/simulation/start").json()
        assert body["result"] == "ok"
        assert body["stats"]["status"] == "RUNNING"
        assert controller.is_running

        controller.tick()
        assert client.get("/api/stats").json()["time_elapsed"] == 2.0

        client.post("/api/simulation/pause")
        assert client.get("/api/stats").json()["status"] == "PAUSED"

        client.post("/api/simulation/reset")
        stats = client.get("/api/stats").json()
        assert stats["status"] == "READY"
        assert stats["time_elapsed"] == 0.0

        client.post("/api/simulation/new-scenario")
        assert client.get("/api/stats").json()["status"] == "READY"

    def test_vessel_lookup(self, client):
        """Known vessels are returned with their anomalies; unknown ids are 404."""
        body = client.get("/api/vessels/vessel-0").json()
        assert body["id"] == "vessel-0"
        assert body["anomalies"] == []
        assert client.get("/api/vessels/nope").status_code == 404

    def test_select(self, client, controller):
        """Selecting a vessel updates the controller's UI selection."""
        resp = client.post("/api/select", json={"vessel_id": "vessel-2"})
        assert resp.json()["selected_vessel_id"] == "vessel-2"
        assert controller.selected_vessel_id == "vessel-2"

    def test_events_filter(self, client):
        """Events can be filtered by type; an unknown type is a 400."""
        assert client.get("/api/events").json() == []
        assert client.get("/api/events?type=AIS_LOSS").json() == []
        assert client.get("/api/events?type=BOGUS").status_code == 400

    def test_report(self, client):
        """The report endpoint summarizes the current scenario."""
        body = client.get("/api/report").json()
        assert body["summary"]["total_vessels"] == 15

    def test_websocket_sends_status(self, client):
        """A new event client immediately receives the current status."""
        with client.websocket_connect("/ws/events") as ws:
            message = ws.receive_json()
            assert message["type"] == "status"
            assert message["stats"]["status"] == "READY"

    @pytest.mark.parametrize("content", ["[]", "null", "{not json", '{"vessel_id": 3}'])
    def test_select_rejects_bad_body(self, client, controller, content):
        """A select body that is not an object with a string id is a 400."""
        resp = client.post("/api/select", content=content,
                           headers={"content-type": "application/json"})
        assert resp.status_code == 400
        assert "error" in resp.json()
        assert controller.selected_vessel_id is None
