"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def ready(request: Request) -> dict[str, str]:
    scheduler = getattr(request.app.state, "scheduler", None)
    return {
        "status": "ready",
        "scheduler": "running" if scheduler is not None and scheduler.running else "stopped",
    }
