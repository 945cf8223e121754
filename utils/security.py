"""
security helpers:
- Argon2 password hashing via argon2-cffi
- SHA-256 digests for refresh tokens (deterministic, so they can be looked up)
- RS256 key pair handling and JWT creation/verification via PyJWT + cryptography
"""
from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError, VerifyMismatchError
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from utils.exceptions import InternalError

REFRESH_TOKEN_BYTES = 32


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_password_hasher(time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 4) -> PasswordHasher:
    """Argon2id hasher with a tunable work factor."""
    return PasswordHasher(time_cost=time_cost, memory_cost=memory_cost, parallelism=parallelism)


def hash_password(ph: PasswordHasher, password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    try:
        return ph.hash(password)
    except HashingError as exc:
        raise InternalError(f"password hashing failed: {exc}") from exc


def verify_password(ph: PasswordHasher, password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except VerifyMismatchError:
        return False
    except (VerificationError, InvalidHashError) as exc:
        raise InternalError(f"password verification failed: {exc}") from exc


def generate_refresh_token() -> str:
    """Random, URL-safe refresh secret (256 bits)."""
    return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)


def hash_token(token: str) -> str:
    """SHA-256 hex digest of a raw refresh token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class SigningKeys:
    """
    RSA key pair used for access tokens.
    Built once at startup and passed to whoever signs or verifies.
    private_pem may be None for verify-only processes.
    """
    public_pem: bytes
    private_pem: bytes | None = None
    algorithm: str = "RS256"

    @classmethod
    def from_files(cls, private_path: str | None, public_path: str, algorithm: str = "RS256") -> "SigningKeys":
        try:
            with open(public_path, "rb") as fh:
                public_pem = fh.read()
            private_pem = None
            if private_path:
                with open(private_path, "rb") as fh:
                    private_pem = fh.read()
            serialization.load_pem_public_key(public_pem)
            if private_pem is not None:
                serialization.load_pem_private_key(private_pem, password=None)
        except (OSError, ValueError, TypeError) as exc:
            raise InternalError(f"failed to load signing keys: {exc}") from exc
        return cls(public_pem=public_pem, private_pem=private_pem, algorithm=algorithm)

    @classmethod
    def generate(cls, key_size: int = 2048) -> "SigningKeys":
        """Fresh in-memory key pair (tests, local tooling)."""
        private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
        private_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        public_pem = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return cls(public_pem=public_pem, private_pem=private_pem)

    def verify_only(self) -> "SigningKeys":
        return SigningKeys(public_pem=self.public_pem, algorithm=self.algorithm)


def create_access_token(keys: SigningKeys, subject: str, email: str, ttl: timedelta, now: datetime | None = None) -> str:
    """Sign an access token carrying sub, email, iat and exp."""
    if keys.private_pem is None:
        raise InternalError("signing key not available")
    now = now or utcnow()
    payload = {
        "sub": str(subject),
        "email": email,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    try:
        return jwt.encode(payload, keys.private_pem, algorithm=keys.algorithm)
    except (jwt.PyJWTError, ValueError, TypeError) as exc:
        raise InternalError(f"JWT encode error: {exc}") from exc


def decode_access_token(keys: SigningKeys, token: str, leeway: int = 0) -> Dict[str, Any]:
    """
    Decode and validate an access token. Raises jwt.InvalidTokenError on a bad
    signature, a malformed token, an expired token or missing claims.
    """
    return jwt.decode(
        token,
        keys.public_pem,
        algorithms=[keys.algorithm],
        leeway=leeway,
        options={"require": ["sub", "email", "iat", "exp"]},
    )
