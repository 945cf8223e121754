"""
Session lifecycle: registration, login, refresh-token rotation and logout.

Access tokens are RS256 JWTs verified statelessly by the AuthGate. Refresh
tokens are opaque random secrets; only their SHA-256 digest is kept in the
ledger, and each one can be redeemed exactly once.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from argon2 import PasswordHasher
from sqlalchemy.exc import SQLAlchemyError

from models.credential_store import CredentialStore
from models.token_ledger import TokenLedger
from models.user import User
from utils.exceptions import AuthError, ConflictError, InternalError
from utils.security import (
    SigningKeys,
    build_password_hasher,
    create_access_token,
    generate_refresh_token,
    hash_password,
    hash_token,
    utcnow,
    verify_password,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "invalid credentials"
INVALID_REFRESH_TOKEN = "invalid or expired refresh token"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int
    refresh_expires_in: int
    token_type: str = "Bearer"


class SessionManager:
    def __init__(
        self,
        credential_store: CredentialStore,
        token_ledger: TokenLedger,
        signing_keys: SigningKeys,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        password_hasher: PasswordHasher | None = None,
    ):
        self.credential_store = credential_store
        self.token_ledger = token_ledger
        self.signing_keys = signing_keys
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.password_hasher = password_hasher or build_password_hasher()
        # verified against on unknown emails so both login failures cost one argon2 verify
        self._dummy_hash = hash_password(self.password_hasher, generate_refresh_token())

    def register(self, email: str, password: str) -> User:
        if self._lookup(self.credential_store.find_user_by_email, email) is not None:
            raise ConflictError("Email already exists")

        pw_hash = hash_password(self.password_hasher, password)
        try:
            user = self.credential_store.create_user(email, pw_hash)
        except SQLAlchemyError as exc:
            raise InternalError(f"failed to create user: {exc}") from exc
        logger.info("registered user %s", user.id)
        return user

    def login(self, email: str, password: str) -> TokenPair:
        user = self._lookup(self.credential_store.find_user_by_email, email)
        if user is None:
            verify_password(self.password_hasher, password, self._dummy_hash)
            logger.warning("login failed: unknown email")
            raise AuthError(INVALID_CREDENTIALS)
        if not verify_password(self.password_hasher, password, user.password_hash):
            logger.warning("login failed: bad password for user %s", user.id)
            raise AuthError(INVALID_CREDENTIALS)

        pair = self.issue_token_pair(user.id, user.email)
        logger.info("user %s logged in", user.id)
        return pair

    def refresh(self, refresh_token: str) -> TokenPair:
        """
        Rotate a refresh token. The presented token is consumed before the new
        pair is issued; reusing it afterwards fails exactly like a token that
        never existed.
        """
        if not refresh_token:
            raise AuthError(INVALID_REFRESH_TOKEN)

        try:
            record = self.token_ledger.claim(hash_token(refresh_token))
        except SQLAlchemyError as exc:
            raise InternalError(f"refresh token lookup failed: {exc}") from exc
        if record is None:
            logger.warning("refresh rejected: unknown, expired or already rotated token")
            raise AuthError(INVALID_REFRESH_TOKEN)

        user = self._lookup(self.credential_store.find_user_by_id, record.user_id)
        if user is None:
            raise AuthError(INVALID_REFRESH_TOKEN)

        pair = self.issue_token_pair(user.id, user.email)
        logger.info("rotated refresh token for user %s", user.id)
        return pair

    def logout(self, refresh_token: str | None) -> None:
        if not refresh_token:
            return
        try:
            deleted = self.token_ledger.delete_by_hash(hash_token(refresh_token))
        except SQLAlchemyError as exc:
            raise InternalError(f"failed to revoke refresh token: {exc}") from exc
        if deleted:
            logger.info("refresh token revoked")

    def logout_everywhere(self, user_id: str) -> int:
        """Revoke every refresh token of a user. Not exposed over HTTP."""
        try:
            deleted = self.token_ledger.delete_all_for_user(user_id)
        except SQLAlchemyError as exc:
            raise InternalError(f"failed to revoke refresh tokens: {exc}") from exc
        logger.info("revoked %d refresh tokens for user %s", deleted, user_id)
        return deleted

    def issue_token_pair(self, user_id: str, email: str) -> TokenPair:
        now = utcnow()
        access_token = create_access_token(self.signing_keys, user_id, email, self.access_ttl, now=now)

        refresh_token = generate_refresh_token()
        try:
            self.token_ledger.store(user_id, hash_token(refresh_token), now + self.refresh_ttl)
        except SQLAlchemyError as exc:
            # the raw token is dropped here; it was never persisted
            raise InternalError(f"failed to persist refresh token: {exc}") from exc

        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=int(self.access_ttl.total_seconds()),
            refresh_expires_in=int(self.refresh_ttl.total_seconds()),
        )

    @staticmethod
    def _lookup(finder, key):
        try:
            return finder(key)
        except SQLAlchemyError as exc:
            raise InternalError(f"user lookup failed: {exc}") from exc
