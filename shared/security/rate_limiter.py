from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from shared.config.settings import Settings
from .jwt_handler import verify_access_token


def user_id_or_ip(request: Request) -> str:
    """
    Key function for SlowAPI: the JWT subject when the caller is
    authenticated, the client address otherwise.
    """
    auth_header = request.headers.get("Authorization")

    if auth_header and auth_header.startswith("Bearer "):
        payload = verify_access_token(auth_header.split(" ", 1)[1], request.app.state.settings)
        if payload and "sub" in payload:
            return f"user:{payload['sub']}"

    return f"ip:{get_remote_address(request)}"


def build_limiter(settings: Settings) -> Limiter:
    """One limiter per app, with its own in-memory counters."""
    return Limiter(key_func=user_id_or_ip, enabled=settings.rate_limit_enabled)
