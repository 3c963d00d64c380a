"""
Admin token guard and public rate limiting
"""

import secrets
import time
from collections import defaultdict, deque
from typing import Deque, Dict, Optional

from fastapi import HTTPException, Depends, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import settings

security = HTTPBearer()

def verify_admin_token(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Verify the planner's bearer token"""
    if not secrets.compare_digest(credentials.credentials, settings.ADMIN_TOKEN):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin token"
        )
    return credentials.credentials

class RateLimiter:
    """Sliding one-minute window of request timestamps per client"""

    def __init__(self, window_seconds: float = 60.0):
        self.window_seconds = window_seconds
        self.requests: Dict[str, Deque[float]] = defaultdict(deque)

    def allow(self, key: str, limit: int, now: Optional[float] = None) -> bool:
        now = time.time() if now is None else now
        window = self.requests[key]
        while window and window[0] <= now - self.window_seconds:
            window.popleft()
        if len(window) >= limit:
            return False
        window.append(now)
        return True

    def reset(self) -> None:
        self.requests.clear()

rate_limiter = RateLimiter()

def rate_limit_check(client_ip: str, limit: int = None) -> bool:
    """Rate limit public endpoints by client IP"""
    if limit is None:
        limit = settings.RATE_LIMIT_PER_MINUTE
    return rate_limiter.allow(client_ip, limit)

def get_client_ip(request: Request) -> str:
    """Extract client IP, honouring reverse proxy headers"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"
