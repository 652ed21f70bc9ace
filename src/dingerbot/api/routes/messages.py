"""Manual chat delivery check."""

from __future__ import annotations

from fastapi import APIRouter

from dingerbot.api import services
from dingerbot.api.schemas import ManualMessageRequest, ManualMessageResponse

router = APIRouter()


@router.post("/test-message", response_model=ManualMessageResponse)
def send_test_message(request: ManualMessageRequest | None = None) -> dict:
    """Send a message to every configured chat target."""
    request = request or ManualMessageRequest()
    results = services.get_tracker_service().send_test_message(request.message)
    return {
        "ok": bool(results) and all(r.ok for r in results),
        "results": [
            {"target": r.target, "ok": r.ok, "error": r.error} for r in results
        ],
    }
