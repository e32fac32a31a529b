"""
Common library for reusable infrastructure components.

Generic modules shared by the partner portal service:

- database: Async MongoDB connection manager (motor)
- auth: Bearer token verification behind a pluggable provider
- utils: Standard responses and HTTP exceptions
- config: Base settings class
"""

from common.database import MongoDB
from common.auth import AuthProvider, JWTAuth, create_auth_dependency
from common.utils import (
    success_response,
    error_response,
    APIException,
    UnauthorizedException,
    NotFoundException,
    ValidationException,
    ServiceUnavailableException,
)
from common.config import BaseAppSettings

__all__ = [
    # Database
    "MongoDB",
    # Auth
    "AuthProvider",
    "JWTAuth",
    "create_auth_dependency",
    # Utils
    "success_response",
    "error_response",
    "APIException",
    "UnauthorizedException",
    "NotFoundException",
    "ValidationException",
    "ServiceUnavailableException",
    # Config
    "BaseAppSettings",
]
