"""
Token issuance and bearer-token authorization for the FastAPI API.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel, Field

from api.config import config
from catalog.models import User

logger = structlog.get_logger(__name__)

# Security scheme; missing headers are reported as 401 by the guards below
security = HTTPBearer(auto_error=False)


class TokenClaims(BaseModel):
    """Verified claim set carried by a bearer token."""
    sub: str = Field(..., description="Subject (user email)")
    jti: str = Field(..., description="Unique token identifier")
    uid: str = Field(..., description="User identifier")
    roles: List[str] = Field(default_factory=list, description="Assigned role names")
    iss: str = Field(..., description="Issuer")
    aud: str = Field(..., description="Audience")
    exp: int = Field(..., description="Expiry as a Unix timestamp")
    iat: Optional[int] = Field(None, description="Issue time as a Unix timestamp")

    def has_role(self, role: str) -> bool:
        return role in self.roles


class TokenIssuer:
    """Signs and verifies HS256 JSON Web Tokens with a shared secret."""

    def __init__(
        self,
        key: str,
        issuer: str,
        algorithm: str = "HS256",
        expire_hours: int = 24
    ):
        self.key = key
        self.issuer = issuer
        self.algorithm = algorithm
        self.lifetime = timedelta(hours=expire_hours)

    @classmethod
    def from_config(cls) -> "TokenIssuer":
        return cls(
            key=config.jwt_key,
            issuer=config.jwt_issuer,
            algorithm=config.jwt_algorithm,
            expire_hours=config.token_expire_hours,
        )

    def build_claims(self, user: User, roles: List[str], issued_at: Optional[datetime] = None) -> Dict:
        """
        Assemble the claim set for a verified user.

        Args:
            user: Authenticated user
            roles: Role names assigned to the user
            issued_at: Issue time (defaults to now, UTC)

        Returns:
            Claims dictionary ready for signing
        """
        now = issued_at or datetime.now(timezone.utc)
        return {
            "sub": user.email,
            "jti": str(uuid.uuid4()),
            "uid": str(user.id),
            "roles": list(roles),
            "iss": self.issuer,
            "aud": self.issuer,
            "iat": int(now.timestamp()),
            "exp": int((now + self.lifetime).timestamp()),
        }

    def generate(self, user: User, roles: List[str], issued_at: Optional[datetime] = None) -> str:
        """Issue a signed token for ``user``."""
        claims = self.build_claims(user, roles, issued_at=issued_at)
        token = jwt.encode(claims, self.key, algorithm=self.algorithm)
        logger.info("Token issued", user_id=claims["uid"], jti=claims["jti"], roles=claims["roles"])
        return token

    def decode(self, token: str) -> TokenClaims:
        """
        Verify signature, issuer, audience and expiry.

        Raises:
            JWTError: If the token is invalid or expired
        """
        payload = jwt.decode(
            token,
            self.key,
            algorithms=[self.algorithm],
            audience=self.issuer,
            issuer=self.issuer,
        )
        return TokenClaims(**payload)


def get_token_issuer() -> TokenIssuer:
    return TokenIssuer.from_config()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenClaims:
    """
    Verify the bearer token from the request.

    Returns:
        Decoded claims if the token is valid

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    if credentials is None or not credentials.credentials:
        logger.warning("Missing bearer token")
        raise _unauthorized("Not authenticated")

    try:
        return issuer.decode(credentials.credentials)
    except ExpiredSignatureError:
        logger.warning("Expired token presented")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning("Invalid token presented", error=str(e))
        raise _unauthorized("Invalid token")


def require_role(role: str) -> Callable:
    """Build a dependency that admits only tokens carrying ``role``."""

    async def guard(claims: TokenClaims = Depends(require_user)) -> TokenClaims:
        if not claims.has_role(role):
            logger.warning("Role required", role=role, user_id=claims.uid)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{role}' required",
            )
        return claims

    return guard
