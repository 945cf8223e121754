"""
Bearer-token guard for protected routes.

Verification only needs the public key, so any number of processes can check
tokens without being able to mint them. Every verification failure maps to the
same "invalid token" error.
"""
from __future__ import annotations

import logging
from typing import Any, Dict

import jwt

from utils.exceptions import AuthError
from utils.security import SigningKeys, decode_access_token

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class AuthGate:
    def __init__(self, signing_keys: SigningKeys, leeway: int = 0):
        self.signing_keys = signing_keys.verify_only()
        self.leeway = leeway

    def authenticate(self, header_value: str | None) -> Dict[str, Any]:
        """Return the verified claims for an Authorization header value."""
        if not header_value:
            raise AuthError("missing authorization header")
        if not header_value.startswith(BEARER_PREFIX):
            raise AuthError("invalid authorization header format")
        return self.verify(header_value[len(BEARER_PREFIX):].strip())

    def verify(self, token: str) -> Dict[str, Any]:
        try:
            claims = decode_access_token(self.signing_keys, token, leeway=self.leeway)
        except jwt.PyJWTError as exc:
            logger.info("rejected access token: %s", exc.__class__.__name__)
            raise AuthError("invalid token") from exc
        return {
            "sub": claims["sub"],
            "email": claims["email"],
            "iat": claims["iat"],
            "exp": claims["exp"],
        }
