"""
FastAPI application factory for the detection queue service.

Routes:
- POST /queue -> upload an image for detection
- GET /result/{id} -> stored detections for a job
- GET /api/health -> queue and scheduler status
"""

from __future__ import annotations

from fastapi import FastAPI

from runtime.context import RuntimeContext
from .routes import api


def create_app(ctx: RuntimeContext) -> FastAPI:
    """Create the FastAPI app bound to a runtime context."""
    app = FastAPI(
        title="Detection Queue",
        version="0.1.0",
        description="Queued object detection over uploaded images",
    )
    app.state.ctx = ctx
    app.include_router(api.router)
    return app
