"""
api/routes/chirps.py -- Chirp CRUD endpoints.

Routes:
  POST   /api/chirps              -- create (access token required)
  GET    /api/chirps              -- list; ?author_id=<uuid>&sort=asc|desc
  GET    /api/chirps/{chirp_id}   -- single chirp
  DELETE /api/chirps/{chirp_id}   -- delete own chirp (access token required)

Ownership: DELETE compares the chirp's user_id to the token subject. Another
user's chirp is 403, not 404 -- the chirp's existence is public anyway.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from api.models import ChirpCreate, ChirpResponse
from auth.dependencies import get_current_user_id
from chirps.filter import MAX_CHIRP_LENGTH, clean_body, is_too_long
from chirps.models import Chirp
from chirps.store import ChirpStore

router = APIRouter()


@router.post("/chirps", response_model=ChirpResponse, status_code=201)
def create_chirp(
    request: Request,
    body: ChirpCreate,
    user_id: UUID = Depends(get_current_user_id),
) -> ChirpResponse:
    """Post a chirp as the authenticated user. Banned words are masked."""
    if is_too_long(body.body):
        raise HTTPException(
            status_code=400,
            detail={"code": "chirp_too_long", "message": f"Chirp is too long (max {MAX_CHIRP_LENGTH})."},
        )
    store: ChirpStore = request.app.state.chirp_store
    chirp = store.create_chirp(Chirp(body=clean_body(body.body), user_id=user_id))
    return ChirpResponse.from_chirp(chirp)


@router.get("/chirps", response_model=list[ChirpResponse])
def list_chirps(
    request: Request,
    author_id: Optional[UUID] = None,
    sort: str = "asc",
) -> list[ChirpResponse]:
    """List chirps by creation time. Unknown sort values fall back to ascending."""
    store: ChirpStore = request.app.state.chirp_store
    chirps = store.list_chirps(author_id=author_id, descending=(sort == "desc"))
    return [ChirpResponse.from_chirp(c) for c in chirps]


@router.get("/chirps/{chirp_id}", response_model=ChirpResponse)
def get_chirp(request: Request, chirp_id: UUID) -> ChirpResponse:
    store: ChirpStore = request.app.state.chirp_store
    chirp = store.get_chirp(chirp_id)
    if chirp is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "Chirp not found."},
        )
    return ChirpResponse.from_chirp(chirp)


@router.delete("/chirps/{chirp_id}", status_code=204)
def delete_chirp(
    request: Request,
    chirp_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
) -> Response:
    store: ChirpStore = request.app.state.chirp_store
    chirp = store.get_chirp(chirp_id)
    if chirp is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "Chirp not found."},
        )
    if chirp.user_id != user_id:
        raise HTTPException(
            status_code=403,
            detail={"code": "forbidden", "message": "You can only delete your own chirps."},
        )
    store.delete_chirp(chirp_id)
    return Response(status_code=204)
