"""Identity business logic layer."""

from __future__ import annotations

import logging

from fastapi import Depends

from coachbook.core.config import Settings, get_settings
from coachbook.core.enums import RoleEnum
from coachbook.core.security import create_access_token, decode_token, oauth2_scheme, verify_password
from coachbook.modules.identity.schemas import AdminPrincipal, LoginRequest, TokenResponse
from coachbook.shared.exceptions import UnauthorizedException

logger = logging.getLogger(__name__)

ADMIN_SUBJECT = "admin"


class IdentityService:
    """Single-admin authentication backed by a configured password hash."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def login(self, payload: LoginRequest) -> TokenResponse:
        """Check the admin password and issue an access token."""
        password_hash = self.settings.admin_password_hash
        if not password_hash or not verify_password(payload.password, password_hash):
            logger.warning("Rejected admin login attempt")
            raise UnauthorizedException("Invalid credentials")

        access_token = create_access_token(subject=ADMIN_SUBJECT, role=RoleEnum.ADMIN.value)
        return TokenResponse(access_token=access_token)

    def get_principal_from_access_token(self, token: str) -> AdminPrincipal:
        """Resolve the admin principal from an access token."""
        payload = decode_token(token)
        if payload.get("type") != "access":
            raise UnauthorizedException("Invalid access token")

        subject = payload.get("sub")
        if not subject:
            raise UnauthorizedException("Token subject is missing")
        if payload.get("role") != RoleEnum.ADMIN:
            raise UnauthorizedException("Operation not permitted for your role")

        return AdminPrincipal(subject=str(subject), role=str(payload["role"]))


def get_identity_service() -> IdentityService:
    """Dependency to provide identity service."""
    return IdentityService(get_settings())


async def require_admin(
    token: str = Depends(oauth2_scheme),
    service: IdentityService = Depends(get_identity_service),
) -> AdminPrincipal:
    """Resolve the authenticated admin from the bearer token."""
    return service.get_principal_from_access_token(token)
