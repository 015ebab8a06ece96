"""Demo endpoints for exercising autoscaling, alerting and dashboards."""

import gc
import logging
import random

import numpy as np
from fastapi import APIRouter
from fastapi.responses import JSONResponse, PlainTextResponse

logger = logging.getLogger(__name__)

router = APIRouter()

SIMULATED_ERRORS = {
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}


def simulate_load(size: int = 100_000, rounds: int = 100) -> float:
    """Burn CPU and allocate memory, then force a collection. Returns the accumulated result."""
    data = np.random.random(size)
    result = 0.0
    for _ in range(rounds):
        result += float(np.sum(np.sqrt(data) * np.sin(data) * np.cos(data)))

    del data
    gc.collect()
    return result


@router.get("/", response_class=PlainTextResponse)
def root() -> str:
    return "Hello, World Tilt@!"


@router.get("/load", response_class=PlainTextResponse)
def load() -> str:
    result = simulate_load()
    return f"Load test completed. Result: {result:f}"


@router.get("/error")
def error() -> JSONResponse:
    status_code = random.choice(list(SIMULATED_ERRORS))
    logger.info("Simulating HTTP %d", status_code)
    return JSONResponse({"error": SIMULATED_ERRORS[status_code]}, status_code=status_code)
