"""
Metrics exposition endpoint.
"""

from typing import Any

from fastapi import APIRouter, Request

router = APIRouter(tags=["metrics"])


@router.get("/metrics")
async def metrics_route(request: Request) -> dict[str, Any]:
    """Return the current histogram snapshot."""
    return {"metrics": request.app.state.metrics_registry.snapshot()}
