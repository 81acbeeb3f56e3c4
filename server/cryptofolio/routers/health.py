from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter()
_started = datetime.now(timezone.utc)

@router.api_route("", methods=["GET", "HEAD"])
def health():
    now = datetime.now(timezone.utc)
    return {
        "status": "ok",
        "service": "cryptofolio-api",
        "time": now.isoformat().replace("+00:00", "Z"),
        "uptimeSec": int((now - _started).total_seconds()),
        "version": "v0.1.0"
    }
