"""
Manages API routes for service status and decoder configuration.

This module provides FastAPI endpoints for:
- Liveness probing and Prometheus metrics.
- Server status (version, uptime, loaded layouts).
- The record layouts the decoder uses, parsed and as the raw YAML file.
"""

import logging
import os
import time

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from card_daemon._version import VERSION
from card_daemon.config import get_layout_path
from card_daemon.models import ServerStatus
from hsl_decoder.layouts import default_layouts

logger = logging.getLogger(__name__)

api_router_status = APIRouter()

SERVER_START_TIME = time.time()


@api_router_status.get("/healthz")
async def healthz():
    """Liveness probe."""
    return {"status": "ok"}


@api_router_status.get("/metrics")
def metrics():
    """Prometheus metrics endpoint."""
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


@api_router_status.get("/status/server", response_model=ServerStatus)
def get_server_status():
    """Returns basic server status information."""
    layout_set = default_layouts()
    return ServerStatus(
        status="ok",
        version=VERSION,
        server_start_time_unix=SERVER_START_TIME,
        uptime_seconds=time.time() - SERVER_START_TIME,
        layout_path=layout_set.path,
        layout_count=len(layout_set.layouts),
    )


@api_router_status.get("/layouts")
def get_layouts():
    """Returns the loaded record layouts with their version and source document."""
    layout_set = default_layouts()
    return {
        "version": layout_set.version,
        "spec_document": layout_set.spec_document,
        "path": layout_set.path,
        "layouts": [layout.to_dict() for layout in layout_set.layouts.values()],
    }


@api_router_status.get("/config/layouts", response_class=PlainTextResponse)
def get_layout_file():
    """Returns the layout YAML file as text."""
    layout_path = get_layout_path()
    if not os.path.exists(layout_path):
        logger.error(f"API Error: Layout file not found at '{layout_path}'")
        raise HTTPException(status_code=404, detail="Layout file not found.")
    try:
        with open(layout_path, "r", encoding="utf-8") as f:
            return PlainTextResponse(f.read())
    except OSError as e:
        logger.error(f"API Error: Could not read layout file '{layout_path}': {e}")
        raise HTTPException(status_code=500, detail=f"Error reading layout file: {e}")
