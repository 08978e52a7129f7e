import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from core.config import settings

logger = logging.getLogger(__name__)
security = HTTPBearer()

STUDENT_ROLE = "student"
TUTOR_ROLE = "tutor"
VALID_ROLES = (STUDENT_ROLE, TUTOR_ROLE)


@dataclass
class AuthContext:
    """Structured auth context from JWT claims.

    Provides convenient properties for checking the caller's role:
    - is_student: True when the token was issued to a student
    - is_tutor: True when the token was issued to a tutor
    """

    user_id: str
    role: str
    name: str | None = None
    email: str | None = None

    @property
    def is_student(self) -> bool:
        """True when the caller is a student."""
        return self.role == STUDENT_ROLE

    @property
    def is_tutor(self) -> bool:
        """True when the caller is a tutor."""
        return self.role == TUTOR_ROLE


def decode_token(token: str) -> dict:
    """Verify signature and expiry of a bearer token and return its claims."""
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        options={"verify_aud": False},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> AuthContext:
    """Validate JWT and return AuthContext with user and role claims."""
    token = credentials.credentials

    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.JWTClaimsError:
        raise HTTPException(status_code=401, detail="Invalid claims")
    except JWTError as e:
        logger.warning("JWT validation error: %s", e)
        raise HTTPException(status_code=401, detail="Could not validate credentials")

    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or role not in VALID_ROLES:
        raise HTTPException(status_code=401, detail="Invalid claims")

    return AuthContext(
        user_id=str(user_id),
        role=role,
        name=payload.get("name"),
        email=payload.get("email"),
    )


async def require_student(auth: AuthContext = Depends(get_current_user)) -> AuthContext:
    """Dependency that requires the student role."""
    if not auth.is_student:
        raise HTTPException(
            status_code=403,
            detail="Only students can perform this action"
        )
    return auth


async def require_tutor(auth: AuthContext = Depends(get_current_user)) -> AuthContext:
    """Dependency that requires the tutor role."""
    if not auth.is_tutor:
        raise HTTPException(
            status_code=403,
            detail="Only tutors can perform this action"
        )
    return auth
