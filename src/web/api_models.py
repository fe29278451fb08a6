from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class QueueResponse(BaseModel):
    """Answer to an upload: exactly one of id/err is set."""
    id: Optional[str] = Field(None, description="Job id when the upload was admitted")
    err: Optional[str] = Field(None, description="Reason the upload was rejected")


class HealthResponse(BaseModel):
    status: str = Field(..., description="running|stopped")
    timestamp: float
    platform: str
    python: str
    model_path: Optional[str]
    staging_dir: str
    results_dir: str
    disk: Dict[str, Any]
    uptime_seconds: int
    queue_length: int
    queue_capacity: int
    queue_full: bool
    scheduler_running: bool = False
    scheduler: Optional[Dict[str, Any]] = None
