"""
Smokewatch API Endpoints
"""

import os
import sys
from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, Response
from loguru import logger
from pydantic import BaseModel, Field

# Add core to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.smokewatch.device_client import DeviceClient
from core.smokewatch.exceptions import DeviceUnreachableError
from core.smokewatch.export import export_filename
from core.smokewatch.session import MonitorSession

APP_NAME = "Smokewatch"
VERSION = "0.1.0"

router = APIRouter()


def _session(request: Request) -> MonitorSession:
    return request.app.state.session


@router.get("/api/health")
async def health_check(request: Request):
    """Health check endpoint."""
    sampler = request.app.state.sampler
    return {
        "status": "healthy",
        "app": APP_NAME,
        "version": VERSION,
        "mode": _session(request).settings.mode,
        "sampling": sampler.running if sampler else False,
    }


@router.get("/api/status")
def device_status(request: Request, ip: str | None = Query(default=None)):
    """Proxy the controller's JSON status.

    Returns the device body verbatim, 400 without an address and 502 when
    the device cannot be reached.
    """
    if not ip:
        return JSONResponse(status_code=400, content={"error": "Missing IP"})

    client: DeviceClient = request.app.state.device_client
    try:
        return client.get_status(ip)
    except DeviceUnreachableError as e:
        logger.warning(f"Device {ip} unreachable: {e}")
        return JSONResponse(status_code=502, content={"error": "Unreachable", "details": str(e)})


@router.get("/api/session")
async def session_state(request: Request):
    """Current sample, prediction and status."""
    return _session(request).state()


class PitTargetRequest(BaseModel):
    """Request body for changing the pit set-point."""
    pit_target: float = Field(gt=0, lt=1000)


@router.post("/api/session/pit_target")
async def set_pit_target(request: Request, body: PitTargetRequest):
    """Change the pit set-point used for LOCKED/ADJUSTING classification."""
    session = _session(request)
    session.set_pit_target(body.pit_target)
    return session.state()


@router.post("/api/session/reset")
async def reset_session(request: Request):
    """Clear the history buffer to start a new cook."""
    session = _session(request)
    session.reset()
    return session.state()


@router.get("/api/history")
async def history(request: Request):
    """Buffered samples, oldest first."""
    samples = _session(request).history.snapshot()
    return {
        "count": len(samples),
        "samples": [s.to_dict() for s in samples],
    }


@router.get("/api/export")
async def export_log(
    request: Request,
    fan: Literal["current", "sample"] = Query(default="current"),
):
    """Download the cook log as CSV.

    fan=current writes the current fan duty on every row; fan=sample writes
    each sample's own fan duty.
    """
    body = _session(request).export_csv(per_sample_fan=(fan == "sample"))
    filename = export_filename(datetime.now(timezone.utc).date())
    logger.info(f"Exporting cook log {filename}")
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
