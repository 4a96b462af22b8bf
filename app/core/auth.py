"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification (TokenManager)
- FastAPI dependencies for protected routes (authentication + role checks)
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.core.config import get_settings
from app.core.errors import Forbidden, NotFound, TokenExpired, TokenInvalid, Unauthorized
from app.schemas.schemas import ProfileResponse
from app.services.mongo_service import UserStore

logger = logging.getLogger(__name__)

settings = get_settings()

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

# Bearer token extractor; missing headers are reported by get_current_user
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password against hash."""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Stored value is not a recognizable hash
        return False


class TokenManager:
    """Issues and verifies signed session tokens.

    Signing configuration is handed in explicitly; nothing here reads
    module-level settings.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_days: int = 30):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = timedelta(days=expire_days)

    def create_access_token(self, subject: str, expires_delta: Optional[timedelta] = None) -> str:
        """Create JWT access token with `subject` as the `sub` claim."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(subject),
            "iat": now,
            "exp": now + (expires_delta if expires_delta is not None else self.expires_delta),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> str:
        """Verify `token` and return its subject.

        Raises:
            TokenExpired: past the `exp` claim.
            TokenInvalid: bad signature, malformed token, or no subject.
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            raise TokenExpired() from exc
        except JWTError as exc:
            raise TokenInvalid() from exc

        subject = payload.get("sub")
        if not subject:
            raise TokenInvalid()
        return subject


def get_token_manager() -> TokenManager:
    """FastAPI dependency - TokenManager built from the current settings."""
    current = get_settings()
    return TokenManager(
        secret_key=current.jwt_secret_key,
        algorithm=current.jwt_algorithm,
        expire_days=current.jwt_expire_days,
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenManager = Depends(get_token_manager),
) -> ProfileResponse:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        def route(user: ProfileResponse = Depends(get_current_user)):
            return user
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Not authorized, no token")

    user_id = tokens.decode_token(credentials.credentials)

    try:
        user = UserStore().get_by_id(user_id)
    except NotFound as exc:
        # Signed token, but the subject is not an ObjectId
        raise TokenInvalid() from exc
    if user is None:
        raise Unauthorized("Not authorized, user no longer exists")

    return ProfileResponse(
        id=str(user["_id"]), name=user.get("name"), email=user["email"], role=user["role"]
    )


def require_roles(*roles: str) -> Callable:
    """
    Dependency factory - Require the authenticated user's role to be in `roles`.

    Usage:
        @router.delete("/{id}", dependencies=[Depends(require_roles("admin"))])
    """
    allowed = set(roles)

    def check_role(user: ProfileResponse = Depends(get_current_user)) -> ProfileResponse:
        if user.role not in allowed:
            logger.warning("Role %s denied, route requires %s", user.role, sorted(allowed))
            raise Forbidden(f"User role {user.role} is not authorized to access this route")
        return user

    return check_role


require_admin = require_roles("admin")
