from __future__ import annotations

import httpx

from services.storefront.app.config import Settings
from services.storefront.app.services.auth_base import AuthBackendError, Principal
from services.storefront.app.services.errors import UpstreamConfigMissingError


class SupabaseAuthVerifier:
    """Resolves access tokens against a hosted Supabase auth endpoint."""

    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> SupabaseAuthVerifier:
        if not settings.supabase_url.strip():
            raise UpstreamConfigMissingError("SUPABASE_URL", "AUTH_PROVIDER=supabase")
        if not settings.supabase_service_role_key.strip():
            raise UpstreamConfigMissingError("SUPABASE_SERVICE_ROLE_KEY", "AUTH_PROVIDER=supabase")
        return cls(
            settings.supabase_url.strip(),
            settings.supabase_service_role_key.strip(),
            timeout=settings.http_timeout_seconds,
        )

    def resolve(self, token: str) -> Principal | None:
        if not token:
            return None

        try:
            resp = httpx.get(
                f"{self._base_url}/auth/v1/user",
                headers={"apikey": self._api_key, "Authorization": f"Bearer {token}"},
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            raise AuthBackendError(f"Auth backend unreachable: {e}") from e

        if resp.status_code in (401, 403):
            return None
        if resp.status_code != 200:
            raise AuthBackendError(f"Auth backend error: HTTP {resp.status_code}")

        data = resp.json()
        user_id = str(data.get("id") or "")
        if not user_id:
            return None
        return Principal(user_id=user_id, email=data.get("email") or None)
