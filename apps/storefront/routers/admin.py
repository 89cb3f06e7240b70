from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks

from ..core.dataset import refresh_catalog

router = APIRouter()


@router.post("/refresh")
def refresh_snapshot(background_tasks: BackgroundTasks):
    """Drop the cached catalog snapshot; the next query reloads it."""
    background_tasks.add_task(refresh_catalog)
    return {"status": "scheduled"}
