"""Liveness, readiness and startup probes, shared by the API and the worker."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/livez", response_class=PlainTextResponse)
def livez() -> str:
    """Process is up. No dependency checks."""
    return "OK"


@router.get("/healthz", response_class=PlainTextResponse)
def healthz() -> str:
    return "OK"


@router.get("/readyz", response_class=PlainTextResponse)
def readyz(request: Request):
    """Ready when the quote store answers. Cache reachability is only reported."""
    status = request.app.state.probe.check_connection()
    if not status.cache:
        logger.warning("Readiness: quote cache unreachable, serving from store only")
    if not status.ready:
        return PlainTextResponse("store unavailable", status_code=503)
    return "OK"
