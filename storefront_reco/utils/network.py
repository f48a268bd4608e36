from typing import Optional
from starlette.requests import Request

# Proxy headers checked in order before falling back to the socket peer
_FORWARD_HEADERS = ("X-Forwarded-For", "X-Real-IP", "X-Client-IP")


def client_ip_address(request: Request) -> Optional[str]:
    """
    Best-effort client address for anonymous viewers.
    X-Forwarded-For contributes its first hop; 'unknown' values are skipped.
    """
    for header in _FORWARD_HEADERS:
        value = request.headers.get(header)
        if not value or value.strip().lower() == "unknown":
            continue
        return value.split(",")[0].strip()
    return request.client.host if request.client else None
