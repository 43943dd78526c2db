"""
Authentication dependencies for FastAPI
Verifies bearer tokens issued by the auth service; this service never issues them
"""

from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from restaurant_reviews.core.config import config
from restaurant_reviews.core.logger import logger
from restaurant_reviews.models.user import User

# Missing or non-bearer headers resolve to None; get_current_user answers 401
bearer_scheme = HTTPBearer(auto_error=False)


class AuthError(Exception):
    """Token could not be verified"""
    def __init__(self, message: str, status_code: int = status.HTTP_401_UNAUTHORIZED):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_jwt(token: str) -> dict:
    """
    Verify the signature and expiry of a token and return its claims

    Raises:
        AuthError: If token is invalid or expired
    """
    try:
        return jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid token: {str(e)}", metadata={"event": "auth_invalid_token"})
        raise AuthError("Invalid token")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    """
    Caller identity from the Authorization header.
    Raises 401 when the header is missing, malformed, or the token is rejected.
    """
    if credentials is None:
        logger.warning("Authentication required: No bearer token provided")
        raise _unauthorized("Authentication required")

    try:
        user = User.from_token_payload(decode_jwt(credentials.credentials))
    except AuthError as e:
        logger.warning(f"Authentication failed: {e.message}")
        raise _unauthorized(e.message)
    except ValueError as e:
        logger.warning(f"Authentication failed: {e}", metadata={"event": "auth_missing_user_id"})
        raise _unauthorized("Invalid token: Missing user identifier")

    logger.debug(f"Authentication successful for user: {user.id}", user_id=user.id)
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Caller must carry the admin role; moderation and reconciliation routes use this"""
    if not user.is_admin():
        logger.warning(
            f"Admin access denied for user: {user.id}",
            user_id=user.id,
            metadata={"event": "admin_access_denied", "roles": user.roles}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return user
