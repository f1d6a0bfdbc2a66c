"""Identity API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from coachbook.modules.identity.schemas import AdminPrincipal, LoginRequest, TokenResponse
from coachbook.modules.identity.service import IdentityService, get_identity_service, require_admin

router = APIRouter(prefix="/identity", tags=["identity"])


@router.post("/auth/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    service: IdentityService = Depends(get_identity_service),
) -> TokenResponse:
    """Sign in with the admin password and return a bearer token."""
    return service.login(payload)


@router.get("/me", response_model=AdminPrincipal)
async def get_me(principal: AdminPrincipal = Depends(require_admin)) -> AdminPrincipal:
    """Return the authenticated principal."""
    return principal
