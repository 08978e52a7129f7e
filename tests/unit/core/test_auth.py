"""Unit tests for authentication module."""

import time
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException
from jose import jwt

from core.auth import AuthContext, get_current_user, require_student, require_tutor
from core.config import settings


def make_token(claims: dict, secret: str = None, expires_in: int = 3600) -> str:
    """Sign an HS256 token the way the auth collaborator does."""
    payload = {"iat": int(time.time()), "exp": int(time.time()) + expires_in, **claims}
    return jwt.encode(payload, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def bearer(token: str) -> MagicMock:
    credentials = MagicMock()
    credentials.credentials = token
    return credentials


class TestAuthContext:
    """Tests for AuthContext data class."""

    def test_student_context(self):
        ctx = AuthContext(user_id="user_123", role="student")
        assert ctx.is_student is True
        assert ctx.is_tutor is False
        assert ctx.name is None
        assert ctx.email is None

    def test_tutor_context(self):
        ctx = AuthContext(user_id="user_123", role="tutor", name="Tina", email="t@example.com")
        assert ctx.is_tutor is True
        assert ctx.is_student is False
        assert ctx.name == "Tina"


class TestGetCurrentUser:
    """Tests for get_current_user JWT validation."""

    @pytest.mark.asyncio
    async def test_returns_auth_context(self):
        token = make_token({"sub": "user_123", "role": "tutor", "name": "Tina", "email": "t@example.com"})

        ctx = await get_current_user(bearer(token))

        assert ctx == AuthContext(user_id="user_123", role="tutor", name="Tina", email="t@example.com")

    @pytest.mark.asyncio
    async def test_optional_claims_absent(self):
        token = make_token({"sub": "user_123", "role": "student"})

        ctx = await get_current_user(bearer(token))

        assert ctx.user_id == "user_123"
        assert ctx.name is None
        assert ctx.email is None

    @pytest.mark.asyncio
    async def test_expired_token_raises_401(self):
        token = make_token({"sub": "user_123", "role": "student"}, expires_in=-60)

        with pytest.raises(HTTPException) as exc:
            await get_current_user(bearer(token))

        assert exc.value.status_code == 401
        assert exc.value.detail == "Token expired"

    @pytest.mark.asyncio
    async def test_wrong_secret_raises_401(self):
        token = make_token({"sub": "user_123", "role": "student"}, secret="not-the-secret")

        with pytest.raises(HTTPException) as exc:
            await get_current_user(bearer(token))

        assert exc.value.status_code == 401
        assert exc.value.detail == "Could not validate credentials"

    @pytest.mark.asyncio
    async def test_garbage_token_raises_401(self):
        with pytest.raises(HTTPException) as exc:
            await get_current_user(bearer("not.a.jwt"))

        assert exc.value.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_sub_raises_401(self):
        token = make_token({"role": "student"})

        with pytest.raises(HTTPException) as exc:
            await get_current_user(bearer(token))

        assert exc.value.status_code == 401
        assert exc.value.detail == "Invalid claims"

    @pytest.mark.asyncio
    async def test_unknown_role_raises_401(self):
        token = make_token({"sub": "user_123", "role": "admin"})

        with pytest.raises(HTTPException) as exc:
            await get_current_user(bearer(token))

        assert exc.value.status_code == 401


class TestRoleDependencies:
    """Tests for require_student / require_tutor."""

    @pytest.mark.asyncio
    async def test_require_student_passes_for_student(self):
        ctx = AuthContext(user_id="user_123", role="student")
        assert await require_student(ctx) is ctx

    @pytest.mark.asyncio
    async def test_require_student_rejects_tutor(self):
        with pytest.raises(HTTPException) as exc:
            await require_student(AuthContext(user_id="user_123", role="tutor"))

        assert exc.value.status_code == 403
        assert "Only students" in exc.value.detail

    @pytest.mark.asyncio
    async def test_require_tutor_passes_for_tutor(self):
        ctx = AuthContext(user_id="user_123", role="tutor")
        assert await require_tutor(ctx) is ctx

    @pytest.mark.asyncio
    async def test_require_tutor_rejects_student(self):
        with pytest.raises(HTTPException) as exc:
            await require_tutor(AuthContext(user_id="user_123", role="student"))

        assert exc.value.status_code == 403
        assert "Only tutors" in exc.value.detail
