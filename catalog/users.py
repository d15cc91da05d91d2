"""
Credential store for user identities.

Passwords are hashed with PBKDF2-HMAC-SHA256 and a per-user random salt; the
plain password is never stored. Email addresses double as usernames; they
are stored as submitted and compared case-insensitively.
"""

import hashlib
import hmac
import secrets
from functools import lru_cache
from typing import Iterable, List, Optional

import structlog
from pydantic import BaseModel, Field
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Role, User

logger = structlog.get_logger(__name__)

ADMINISTRATOR = "Administrator"
CUSTOMER = "Customer"
DEFAULT_ROLES = (ADMINISTRATOR, CUSTOMER)

PBKDF2_ITERATIONS = 210_000
_HASH_SCHEME = "pbkdf2_sha256"


class IdentityResult(BaseModel):
    """Outcome of an identity operation."""
    succeeded: bool = Field(..., description="Whether the operation succeeded")
    errors: List[str] = Field(default_factory=list, description="Failure reasons")

    @classmethod
    def failed(cls, *errors: str) -> "IdentityResult":
        return cls(succeeded=False, errors=list(errors))


def hash_password(password: str, iterations: int = PBKDF2_ITERATIONS) -> str:
    """Hash a password as ``pbkdf2_sha256$<iterations>$<salt>$<digest>``."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return f"{_HASH_SCHEME}${iterations}${salt}${digest.hex()}"


def check_password(password: str, encoded: str) -> bool:
    """Compare a password with a stored hash in constant time."""
    try:
        scheme, iterations, salt, expected = encoded.split("$", 3)
        rounds = int(iterations)
    except ValueError:
        return False
    if scheme != _HASH_SCHEME:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), rounds)
    return hmac.compare_digest(digest.hex(), expected)


def validate_password(password: str, min_length: int = 6) -> List[str]:
    """
    Check a password against the store's policy.

    Args:
        password: Candidate password
        min_length: Minimum number of characters

    Returns:
        List of policy violations (empty if the password is acceptable)
    """
    errors = []
    if len(password) < min_length:
        errors.append(f"Passwords must be at least {min_length} characters.")
    if not any(c.isdigit() for c in password):
        errors.append("Passwords must have at least one digit ('0'-'9').")
    if not any(c.islower() for c in password):
        errors.append("Passwords must have at least one lowercase ('a'-'z').")
    if not any(c.isupper() for c in password):
        errors.append("Passwords must have at least one uppercase ('A'-'Z').")
    if all(c.isalnum() for c in password):
        errors.append("Passwords must have at least one non alphanumeric character.")
    return errors


def normalize_email(email: str) -> str:
    return email.strip().lower()


@lru_cache(maxsize=1)
def _unknown_user_hash() -> str:
    """Hash compared against when no account matches the email."""
    return hash_password(secrets.token_hex(16))


class UserStore:
    """Creates and verifies user identities."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def ensure_roles(self, names: Iterable[str] = DEFAULT_ROLES) -> List[Role]:
        """Create any missing roles and return all requested ones."""
        wanted = list(dict.fromkeys(names))
        result = await self.session.execute(select(Role).where(Role.name.in_(wanted)))
        existing = {role.name: role for role in result.scalars().all()}

        missing = [name for name in wanted if name not in existing]
        for name in missing:
            role = Role(name=name)
            self.session.add(role)
            existing[name] = role
        if missing:
            await self.session.commit()
            logger.info("Roles created", roles=missing)

        return [existing[name] for name in wanted]

    async def create(self, email: str, password: str, roles: Iterable[str] = (CUSTOMER,)) -> IdentityResult:
        """
        Create a new identity.

        Args:
            email: Email address, also used as the username
            password: Plain password; only its hash is stored
            roles: Role names to assign

        Returns:
            IdentityResult with the failure reasons when creation is refused
        """
        errors = validate_password(password)
        if errors:
            return IdentityResult.failed(*errors)

        if await self.find_by_email(email) is not None:
            return IdentityResult.failed(f"Username '{email.strip()}' is already taken.")

        try:
            role_rows = await self.ensure_roles(roles)
            user = User(email=email.strip(), password_hash=hash_password(password))
            user.roles = role_rows
            self.session.add(user)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning("User creation failed", error=str(e))
            return IdentityResult.failed("User could not be saved.")

        logger.info("User created", user_id=user.id, roles=list(roles))
        return IdentityResult(succeeded=True)

    async def verify(self, email: str, password: str) -> Optional[User]:
        """Return the user when the password matches, otherwise None."""
        user = await self.find_by_email(email)
        if user is None:
            check_password(password, _unknown_user_hash())
            return None
        if not check_password(password, user.password_hash):
            return None
        return user

    async def get_roles(self, user: User) -> List[str]:
        return user.role_names
