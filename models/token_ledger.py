"""
Refresh-token ledger: persistence for RefreshToken rows, keyed by token hash.

All policy (rotation, expiry windows, error messages) lives in the session
manager. The only non-trivial operation is claim(), which must let exactly one
caller consume a given record even under concurrent refreshes.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from models.refresh_token import RefreshToken


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenLedger:
    def __init__(self, storage):
        self._storage = storage

    def store(self, user_id: str, token_hash: str, expires_at: datetime) -> RefreshToken:
        record = RefreshToken(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
        self._storage.new(record)
        self._storage.save()
        return record

    def find_valid_by_hash(self, token_hash: str) -> Optional[RefreshToken]:
        session = self._storage.get_session()
        return (
            session.query(RefreshToken)
            .filter(RefreshToken.token_hash == token_hash, RefreshToken.expires_at > _now())
            .first()
        )

    def claim(self, token_hash: str) -> Optional[RefreshToken]:
        """
        Look up an unexpired record and delete it in one conditional DELETE.
        Returns the record only if this call's DELETE removed the row; a
        concurrent caller presenting the same hash gets None.
        """
        record = self.find_valid_by_hash(token_hash)
        if record is None:
            return None
        session = self._storage.get_session()
        deleted = (
            session.query(RefreshToken)
            .filter(
                RefreshToken.id == record.id,
                RefreshToken.token_hash == token_hash,
                RefreshToken.expires_at > _now(),
            )
            .delete(synchronize_session=False)
        )
        self._storage.save()
        session.expunge(record)
        if deleted != 1:
            return None
        return record

    def delete_by_hash(self, token_hash: str) -> int:
        session = self._storage.get_session()
        deleted = (
            session.query(RefreshToken)
            .filter(RefreshToken.token_hash == token_hash)
            .delete(synchronize_session=False)
        )
        self._storage.save()
        return deleted

    def delete_all_for_user(self, user_id: str) -> int:
        session = self._storage.get_session()
        deleted = (
            session.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self._storage.save()
        return deleted

    def purge_expired(self) -> int:
        session = self._storage.get_session()
        deleted = (
            session.query(RefreshToken)
            .filter(RefreshToken.expires_at <= _now())
            .delete(synchronize_session=False)
        )
        self._storage.save()
        return deleted
