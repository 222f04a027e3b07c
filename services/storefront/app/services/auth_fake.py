from __future__ import annotations

from services.storefront.app.services.auth_base import Principal


def fake_token(user_id: str, email: str = "") -> str:
    return f"fake:{user_id}:{email}"


class FakeAuthVerifier:
    """Deterministic verifier for tests and local dev.

    Accepts tokens of the form ``fake:<user_id>:<email>``; the email may be empty.
    """

    def resolve(self, token: str) -> Principal | None:
        parts = (token or "").strip().split(":", 2)
        if len(parts) != 3 or parts[0] != "fake" or not parts[1]:
            return None
        return Principal(user_id=parts[1], email=parts[2].strip() or None)
