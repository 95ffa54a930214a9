from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer, APIKeyHeader

from shared.config.settings import Settings, get_app_settings
from .jwt_handler import verify_access_token
from .api_key import verify_api_key

# Bearer <token>, issued by POST /auth/login
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)

# Header carried by service-to-service calls (payment server, stock admin)
api_key_header = APIKeyHeader(name="X-Internal-API-Key", auto_error=False)


async def get_current_user(
    request: Request,
    token: str = Depends(oauth2_scheme),
    settings: Settings = Depends(get_app_settings),
) -> str:
    """Validate the Bearer JWT and return the user id (``sub``) as a string."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token:
        raise credentials_exception

    payload = verify_access_token(token, settings)
    if payload is None or payload.get("sub") is None:
        raise credentials_exception

    user_id = str(payload["sub"])
    # Read back by the rate limiter and by the request logs
    request.state.user_id = user_id
    return user_id


async def verify_internal_api_key(
    api_key: str = Depends(api_key_header),
    settings: Settings = Depends(get_app_settings),
) -> bool:
    if not verify_api_key(api_key, settings.internal_api_key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or missing X-Internal-API-Key header"
        )
    return True
