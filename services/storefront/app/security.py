"""Bearer-token dependencies shared by the shopper and admin routes."""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException
from services.storefront.app.config import Settings, get_settings
from services.storefront.app.services.auth_base import AuthBackendError, Principal, bearer_token
from services.storefront.app.services.auth_factory import get_auth_verifier
from services.storefront.app.services.errors import UpstreamConfigMissingError


def require_user(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> Principal:
    token = bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        verifier = get_auth_verifier(settings)
    except (ValueError, UpstreamConfigMissingError) as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    try:
        principal = verifier.resolve(token)
    except AuthBackendError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e

    if principal is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return principal


def require_admin(
    principal: Principal = Depends(require_user),
    settings: Settings = Depends(get_settings),
) -> Principal:
    if not principal.email:
        raise HTTPException(status_code=401, detail="Not authenticated")

    if principal.email.lower() not in settings.admin_email_list:
        raise HTTPException(status_code=403, detail="Admin access required")

    return principal
