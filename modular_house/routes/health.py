import time
from datetime import datetime

from fastapi import APIRouter, Request

router = APIRouter()

STARTED_AT = time.monotonic()


@router.get("/health")
def health(request: Request):
    return {
        "status": "ok",
        "time": datetime.utcnow().isoformat() + "Z",
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "environment": request.app.state.settings.app.env,
    }
