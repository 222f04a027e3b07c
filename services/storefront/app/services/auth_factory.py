from __future__ import annotations

from services.storefront.app.config import Settings
from services.storefront.app.services.auth_base import AuthVerifier
from services.storefront.app.services.auth_fake import FakeAuthVerifier


def get_auth_verifier(settings: Settings) -> AuthVerifier:
    """Select the auth verifier.

    Default is Supabase, which needs SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY.
    AUTH_PROVIDER=fake trusts ``fake:<id>:<email>`` tokens and is for local dev and tests only.
    """

    provider = settings.auth_provider.strip().lower()

    if provider == "fake":
        return FakeAuthVerifier()

    if provider == "supabase":
        from services.storefront.app.services.auth_supabase import SupabaseAuthVerifier

        return SupabaseAuthVerifier.from_settings(settings)

    raise ValueError(f"Unknown AUTH_PROVIDER={provider!r}. Expected fake or supabase.")
