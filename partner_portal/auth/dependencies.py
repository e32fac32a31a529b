"""
FastAPI dependencies for Auth system.

Tokens are issued by the external identity service; this module only
verifies them and reads the partner/organization claims.
"""

from typing import Annotated, Any, Dict

from fastapi import Depends

from common.auth import AuthProvider, JWTAuth, create_auth_dependency
from common.utils.exceptions import ForbiddenException


_auth_provider: AuthProvider | None = None


def init_auth_services(
    secret: str,
    algorithm: str = "HS256",
    access_token_expire_minutes: int = 30,
) -> None:
    """
    Initialize the token provider.

    Called once at application startup.
    """
    global _auth_provider

    _auth_provider = JWTAuth(
        secret=secret,
        algorithm=algorithm,
        access_token_expire_minutes=access_token_expire_minutes,
    )


def get_auth_provider() -> AuthProvider:
    """Get auth provider instance."""
    if _auth_provider is None:
        raise RuntimeError("Auth services not initialized. Call init_auth_services first.")
    return _auth_provider


get_current_claims = create_auth_dependency(get_auth_provider)


async def require_partner(
    claims: Annotated[Dict[str, Any], Depends(get_current_claims)],
) -> Dict[str, Any]:
    """
    Dependency that requires a partner user.

    Usage:
        @router.get("/partners/profile")
        async def route(partner: Annotated[dict, Depends(require_partner)]):
            return {"partner_id": partner["partnerId"]}
    """
    partner_id = claims.get("partnerId")
    if not partner_id:
        raise ForbiddenException(
            message="Partner access required",
            code="PARTNER_REQUIRED"
        )
    return {"userId": claims["sub"], "partnerId": partner_id}


async def require_organization_user(
    claims: Annotated[Dict[str, Any], Depends(get_current_claims)],
) -> Dict[str, Any]:
    """Dependency that requires a user of an organization."""
    organization_id = claims.get("organizationId")
    if not organization_id:
        raise ForbiddenException(
            message="Organization access required",
            code="ORGANIZATION_REQUIRED"
        )
    return {
        "userId": claims["sub"],
        "organizationId": organization_id,
        "role": claims.get("role"),
    }


async def require_organization_admin(
    user: Annotated[Dict[str, Any], Depends(require_organization_user)],
) -> Dict[str, Any]:
    """Dependency that requires an organization admin."""
    if user.get("role") != "org_admin":
        raise ForbiddenException(
            message="Organization admin access required",
            code="FORBIDDEN"
        )
    return user
