"""
api/routes/webhooks.py -- Inbound webhooks from the Polka payment provider.

Routes:
  POST /api/polka/webhooks -- 'Authorization: ApiKey <POLKA_KEY>'

Only the "user.upgraded" event does anything (sets is_chirpy_red). Every other
event is acknowledged with 204 so Polka stops retrying it.

The key comparison uses hmac.compare_digest. An unset POLKA_KEY rejects every
request rather than accepting an empty key.
"""

from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, HTTPException, Request, Response

from api.models import PolkaWebhook
from auth.errors import AuthError
from auth.store import UserStore
from auth.tokens import get_api_key

logger = logging.getLogger("chirpy.api.webhooks")

router = APIRouter()

_UPGRADE_EVENT = "user.upgraded"


def _require_polka_key(request: Request) -> None:
    expected: str = request.app.state.settings.polka_key
    try:
        presented = get_api_key(request.headers.get("Authorization"))
    except AuthError as exc:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": exc.message},
        ) from exc
    if not expected or not hmac.compare_digest(presented.encode(), expected.encode()):
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Invalid API key."},
        )


@router.post("/polka/webhooks", status_code=204)
def polka_webhook(request: Request, body: PolkaWebhook) -> Response:
    _require_polka_key(request)
    if body.event != _UPGRADE_EVENT:
        return Response(status_code=204)

    user_store: UserStore = request.app.state.user_store
    if not user_store.update_user(body.data.user_id, is_chirpy_red=True):
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "User not found."},
        )
    logger.info("User %s upgraded to Chirpy Red", body.data.user_id)
    return Response(status_code=204)
