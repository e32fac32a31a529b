"""Unit tests for JWT verification and claim dependencies."""

import pytest
from bson import ObjectId

from common.auth import JWTAuth, create_auth_dependency
from common.utils.exceptions import ForbiddenException, UnauthorizedException
from partner_portal.auth.dependencies import (
    require_organization_admin,
    require_organization_user,
    require_partner,
)


@pytest.fixture
def auth():
    return JWTAuth(secret="test-secret", access_token_expire_minutes=5)


@pytest.fixture
def get_claims(auth):
    return create_auth_dependency(lambda: auth)


class TestJWTAuth:
    @pytest.mark.asyncio
    async def test_round_trip_keeps_claims(self, auth):
        partner_id = str(ObjectId())

        token = await auth.create_token("user-1", partnerId=partner_id)
        claims = await auth.verify_token(token)

        assert claims["sub"] == "user-1"
        assert claims["partnerId"] == partner_id

    @pytest.mark.asyncio
    async def test_expired_token_rejected(self, auth):
        token = await JWTAuth(secret="test-secret", access_token_expire_minutes=-1).create_token("user-1")

        with pytest.raises(ValueError):
            await auth.verify_token(token)

    @pytest.mark.asyncio
    async def test_wrong_secret_rejected(self, auth):
        token = await JWTAuth(secret="other").create_token("user-1")

        with pytest.raises(ValueError):
            await auth.verify_token(token)


class TestClaimsDependency:
    @pytest.mark.asyncio
    async def test_missing_header(self, get_claims):
        with pytest.raises(UnauthorizedException):
            await get_claims(None)

    @pytest.mark.asyncio
    async def test_wrong_scheme(self, get_claims, auth):
        token = await auth.create_token("user-1")

        with pytest.raises(UnauthorizedException) as exc_info:
            await get_claims(f"Basic {token}")

        assert exc_info.value.detail["code"] == "INVALID_AUTH_SCHEME"

    @pytest.mark.asyncio
    async def test_valid_bearer(self, get_claims, auth):
        token = await auth.create_token("user-1")

        claims = await get_claims(f"Bearer {token}")

        assert claims["sub"] == "user-1"


class TestRoleDependencies:
    @pytest.mark.asyncio
    async def test_partner_claims(self):
        partner = await require_partner({"sub": "user-1", "partnerId": "p1"})

        assert partner == {"userId": "user-1", "partnerId": "p1"}

    @pytest.mark.asyncio
    async def test_partner_required(self):
        with pytest.raises(ForbiddenException):
            await require_partner({"sub": "user-1"})

    @pytest.mark.asyncio
    async def test_organization_admin(self):
        user = await require_organization_user({"sub": "u", "organizationId": "o", "role": "org_admin"})

        assert await require_organization_admin(user) == user

    @pytest.mark.asyncio
    async def test_organization_user_is_not_admin(self):
        user = await require_organization_user({"sub": "u", "organizationId": "o", "role": "org_user"})

        with pytest.raises(ForbiddenException):
            await require_organization_admin(user)
