"""Server health utilities.

Provides a simple `get_health` function returning server status,
start time, uptime in seconds and the configured storage backend.
"""
from datetime import datetime, timezone
from typing import Optional
import time

# record process start time at import
_START_TIME = time.time()


def get_health(backend_name: Optional[str] = None) -> dict:
    now = time.time()
    start_dt = datetime.fromtimestamp(_START_TIME, tz=timezone.utc)
    return {
        "status": "ok",
        "start_time": start_dt.isoformat(),
        "uptime_seconds": int(now - _START_TIME),
        "backend": backend_name,
    }
