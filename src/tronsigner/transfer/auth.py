"""Shared-secret authentication."""

import hmac
from typing import Optional

from tronsigner.errors import AuthError

SECRET_HEADER = "x-signer-secret"


def extract_secret(headers) -> Optional[str]:
    """Pull the caller secret from X-Signer-Secret or a Bearer Authorization header."""
    secret = headers.get(SECRET_HEADER)
    if secret:
        return secret.strip()

    authorization = headers.get("authorization") or ""
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


class Authenticator:
    """Compares a caller secret with the configured one in constant time."""

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("Authenticator requires a non-empty secret")
        self._secret = secret.encode("utf-8")

    def verify(self, provided: Optional[str]) -> bool:
        if not provided:
            return False
        return hmac.compare_digest(self._secret, provided.encode("utf-8"))

    def authenticate(self, provided: Optional[str]) -> None:
        """Raise AuthError unless the provided secret matches."""
        if not self.verify(provided):
            raise AuthError("missing or invalid signer secret")
