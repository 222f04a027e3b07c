import pytest
from services.storefront.app.config import Settings
from services.storefront.app.services.auth_factory import get_auth_verifier
from services.storefront.app.services.auth_fake import FakeAuthVerifier
from services.storefront.app.services.email_factory import get_email_sender
from services.storefront.app.services.errors import UpstreamConfigMissingError
from services.storefront.app.services.gateway_factory import get_payment_gateway


def test_defaults_are_in_process_fakes() -> None:
    settings = Settings(payment_gateway="mock", auth_provider="fake", email_provider="log")
    assert get_payment_gateway(settings).vendor == "MOCK"
    assert isinstance(get_auth_verifier(settings), FakeAuthVerifier)
    assert get_email_sender(settings).provider == "LOG"


def test_get_payment_gateway_rejects_unknown() -> None:
    with pytest.raises(ValueError, match="Unknown PAYMENT_GATEWAY"):
        get_payment_gateway(Settings(payment_gateway="paypal"))


def test_get_auth_verifier_rejects_unknown() -> None:
    with pytest.raises(ValueError, match="Unknown AUTH_PROVIDER"):
        get_auth_verifier(Settings(auth_provider="ldap"))


def test_get_email_sender_rejects_unknown() -> None:
    with pytest.raises(ValueError, match="Unknown EMAIL_PROVIDER"):
        get_email_sender(Settings(email_provider="carrier-pigeon"))


def test_stripe_requires_secret_key() -> None:
    with pytest.raises(UpstreamConfigMissingError, match="STRIPE_SECRET_KEY"):
        get_payment_gateway(Settings(payment_gateway="stripe", stripe_secret_key=""))


def test_supabase_requires_url_and_key() -> None:
    with pytest.raises(UpstreamConfigMissingError, match="SUPABASE_URL"):
        get_auth_verifier(Settings(auth_provider="supabase", supabase_url=""))

    with pytest.raises(UpstreamConfigMissingError, match="SUPABASE_SERVICE_ROLE_KEY"):
        get_auth_verifier(
            Settings(
                auth_provider="supabase",
                supabase_url="https://x.supabase.co",
                supabase_service_role_key="",
            )
        )


def test_admin_email_list_is_normalized() -> None:
    settings = Settings(admin_emails=" Admin@Example.com, ,ops@example.com ")
    assert settings.admin_email_list == ["admin@example.com", "ops@example.com"]


def test_auth_defaults_to_supabase_and_refuses_without_config(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    for name in ("AUTH_PROVIDER", "SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)
    assert settings.auth_provider == "supabase"

    with pytest.raises(UpstreamConfigMissingError, match="SUPABASE_URL"):
        get_auth_verifier(settings)
