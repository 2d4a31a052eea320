"""
api/routes/admin.py -- Operator endpoints.

Routes:
  GET  /admin/metrics -- HTML page with the static file hit counter
  POST /admin/reset   -- wipe users, refresh tokens and chirps (PLATFORM=dev only)

The hit counter lives on app.state and is incremented by the middleware in
api/main.py for every request under /app/.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates

logger = logging.getLogger("chirpy.api.admin")

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
router = APIRouter()


@router.get("/metrics", response_class=HTMLResponse)
async def metrics(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "metrics.html",
        {"hits": request.app.state.fileserver_hits},
    )


@router.post("/reset", response_class=PlainTextResponse)
def reset(request: Request) -> PlainTextResponse:
    """Delete all data and zero the hit counter. Refused outside dev."""
    if not request.app.state.settings.is_dev:
        raise HTTPException(
            status_code=403,
            detail={"code": "forbidden", "message": "Reset is only allowed in dev environment."},
        )
    request.app.state.chirp_store.delete_all()
    request.app.state.user_store.delete_all()
    request.app.state.fileserver_hits = 0
    logger.warning("Database reset via /admin/reset")
    return PlainTextResponse("Database reset successfully")
