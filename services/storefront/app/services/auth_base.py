from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class AuthBackendError(Exception):
    """The auth backend could not be reached or answered unexpectedly."""


@dataclass(frozen=True, slots=True)
class Principal:
    user_id: str
    email: str | None


class AuthVerifier(Protocol):
    def resolve(self, token: str) -> Principal | None:
        """Return the principal for a bearer token, or None if the token is not valid."""
        ...


def bearer_token(header: str | None) -> str:
    value = (header or "").strip()
    if value.lower().startswith("bearer "):
        return value[7:].strip()
    return value
