"""
core/gateway.py
---------------
Perimeter check for every protected request.

Flow:
  1. Paths outside PROTECTED_PREFIX, PUBLIC_PATHS and CORS preflight pass through.
  2. Both the bearer token and the identity header must be present.
  3. The token's signature and expiry are verified.
  4. The token's user id must equal the identity header.

Runs before any route, dependency, Tenant Resolver or Access Validator.
"""

from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from taskhub.core.config import Settings
from taskhub.core.errors import InvalidSessionToken
from taskhub.core.logging import bind_caller, bind_request_context, get_logger
from taskhub.core.security import SessionClaims, decode_session_token, extract_bearer_token

logger = get_logger(__name__)


def is_public_path(path: str, settings: Settings) -> bool:
    if not path.startswith(settings.PROTECTED_PREFIX):
        return True
    return any(path.startswith(prefix) for prefix in settings.PUBLIC_PATHS)


def authenticate_request(
    path: str,
    method: str,
    authorization: Optional[str],
    user_id: Optional[str],
    settings: Settings,
) -> Optional[SessionClaims]:
    """
    Return verified session claims, or None when the path is not protected.

    Raises:
        InvalidSessionToken: On a missing token or identity header, an invalid
            or expired token, or a token issued for a different user.
    """
    if method == "OPTIONS" or is_public_path(path, settings):
        return None

    token = extract_bearer_token(authorization)
    if not token or not user_id:
        raise InvalidSessionToken("Unauthorized")

    claims = decode_session_token(token, settings)
    if claims.user_id != user_id:
        raise InvalidSessionToken("Token does not match user")
    return claims


class SessionGatewayMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        settings: Settings = request.app.state.settings
        bind_request_context(method=request.method, path=request.url.path)
        try:
            claims = authenticate_request(
                path=request.url.path,
                method=request.method,
                authorization=request.headers.get("authorization"),
                user_id=request.headers.get(settings.USER_ID_HEADER),
                settings=settings,
            )
        except InvalidSessionToken as exc:
            logger.warning("Request rejected by session gateway", reason=exc.detail)
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": exc.detail},
                headers={"WWW-Authenticate": "Bearer"},
            )

        if claims is not None:
            bind_caller(claims.user_id)
        request.state.session = claims
        return await call_next(request)
