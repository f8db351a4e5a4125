"""HTTP routes: simulation state, anomaly/event feeds, and control commands."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from src.controller import SimulationController
from src.recording.models import AnomalyType


def create_router(controller: SimulationController) -> APIRouter:
    router = APIRouter()

    # --- REST API: state ---

    @router.get("/api/state")
    async def api_state():
        state = controller.state
        return JSONResponse({
            **state.to_dict(),
            "status": controller.status.value,
            "selected_vessel_id": controller.selected_vessel_id,
        })

    @router.get("/api/stats")
    async def api_stats():
        return JSONResponse(controller.stats)

    @router.get("/api/config")
    async def api_config():
        cfg = controller.config
        return JSONResponse({
            "duration": controller.duration,
            "tick_interval": controller.tick_interval,
            "vessel_count": controller.vessel_count,
            "enhanced_detection": cfg.simulation.enhanced_detection,
            "detection": asdict(cfg.detection),
        })

    @router.get("/api/vessels")
    async def api_vessels():
        return JSONResponse([v.to_dict() for v in controller.state.vessels])

    @router.get("/api/vessels/{vessel_id}")
    async def api_vessel(vessel_id: str):
        vessel = controller.get_vessel(vessel_id)
        if vessel is None:
            raise HTTPException(status_code=404, detail="Unknown vessel")
        anomalies = controller.event_log.get_by_vessel(vessel_id)
        return JSONResponse({
            **vessel.to_dict(),
            "anomalies": [a.to_dict() for a in anomalies],
        })

    @router.get("/api/anomalies")
    async def api_anomalies():
        return JSONResponse([a.to_dict() for a in controller.anomalies])

    @router.get("/api/events")
    async def api_events(limit: int = 50, type: str | None = None):
        if type:
            try:
                event_type = AnomalyType(type)
            except ValueError:
                return JSONResponse({"error": "Invalid event type"}, 400)
            events = controller.event_log.get_by_type(event_type, limit)
        else:
            events = controller.event_log.get_recent(limit)
        return JSONResponse([e.to_dict() for e in events])

    @router.get("/api/event-stats")
    async def api_event_stats():
        return JSONResponse(controller.event_log.get_stats())

    @router.get("/api/report")
    async def api_report():
        return JSONResponse(controller.report())

    # --- REST API: commands ---

    @router.post("/api/simulation/start")
    async def api_start():
        controller.start()
        return JSONResponse({"result": "ok", "stats": controller.stats})

    @router.post("/api/simulation/pause")
    async def api_pause():
        controller.pause()
        return JSONResponse({"result": "ok", "stats": controller.stats})

    @router.post("/api/simulation/reset")
    async def api_reset():
        controller.reset()
        return JSONResponse({"result": "ok", "stats": controller.stats})

    @router.post("/api/simulation/new-scenario")
    async def api_new_scenario():
        controller.generate_new_scenario()
        return JSONResponse({"result": "ok", "stats": controller.stats})

    @router.post("/api/select")
    async def api_select(request: Request):
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse({"error": "Invalid JSON body"}, 400)
        if not isinstance(body, dict):
            return JSONResponse({"error": "Expected a JSON object"}, 400)
        vessel_id = body.get("vessel_id")
        if vessel_id is not None and not isinstance(vessel_id, str):
            return JSONResponse({"error": "vessel_id must be a string or null"}, 400)
        controller.select_vessel(vessel_id)
        return JSONResponse({"status": "ok", "selected_vessel_id": vessel_id})

    return router
