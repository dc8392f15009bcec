"""Security utilities: Supabase JWT validation and unit access."""

import uuid
from dataclasses import dataclass, field

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from barber_finance.config import settings
from barber_finance.core.database import get_db
from barber_finance.core.exceptions import UnauthorizedError

logger = structlog.get_logger()


@dataclass(frozen=True)
class AuthContext:
    """Authenticated caller and the units they belong to."""

    user_id: str
    email: str | None = None
    unit_ids: frozenset[str] = field(default_factory=frozenset)


def decode_access_token(token: str) -> dict:
    """Decode and validate a Supabase access token."""
    try:
        return jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=[settings.supabase_jwt_algorithm],
            audience=settings.supabase_jwt_audience,
        )
    except ExpiredSignatureError as e:
        raise UnauthorizedError("Token expired") from e
    except JWTError as e:
        raise UnauthorizedError("Invalid token") from e


def canonical_unit_id(unit_id: str) -> str:
    """Lower-case hyphenated form of a UUID; other ids are returned unchanged."""
    try:
        return str(uuid.UUID(unit_id))
    except ValueError:
        return unit_id


def has_unit_access(auth: AuthContext, unit_id: str) -> bool:
    """Whether the caller works in the given unit."""
    wanted = canonical_unit_id(unit_id)
    return any(canonical_unit_id(member) == wanted for member in auth.unit_ids)


# ── Auth Dependencies ─────────────────────────────
security_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security_scheme),
    db: AsyncSession = Depends(get_db),
) -> AuthContext:
    """FastAPI dependency: validate the bearer token and load unit memberships."""
    from barber_finance.models.unit import Professional

    if credentials is None:
        raise UnauthorizedError("Missing or invalid Authorization header")

    payload = decode_access_token(credentials.credentials)

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Token missing subject")

    result = await db.execute(
        select(Professional.unit_id).where(
            Professional.user_id == user_id,
            Professional.is_active.is_(True),
        )
    )
    unit_ids = frozenset(str(unit_id) for unit_id in result.scalars().all())

    if not unit_ids:
        logger.info("Authenticated user has no active unit", user_id=user_id)

    return AuthContext(user_id=user_id, email=payload.get("email"), unit_ids=unit_ids)
