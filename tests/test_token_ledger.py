"""Tests for the refresh-token ledger."""

from datetime import timedelta

import pytest

from models.refresh_token import RefreshToken
from utils.security import hash_token, utcnow


@pytest.fixture
def user(sessions):
    return sessions.register("ledger@example.com", "password123")


@pytest.fixture
def future():
    return utcnow() + timedelta(days=7)


class TestStoreAndLookup:
    def test_store_keeps_only_the_hash(self, ledger, user, future):
        record = ledger.store(user.id, hash_token("raw-secret"), future)

        assert record.token_hash == hash_token("raw-secret")
        assert "raw-secret" not in record.token_hash
        assert "token_hash" not in record.to_dict()

    def test_find_valid_by_hash(self, ledger, user, future):
        ledger.store(user.id, hash_token("raw-secret"), future)

        found = ledger.find_valid_by_hash(hash_token("raw-secret"))

        assert found is not None
        assert found.user_id == user.id

    def test_find_excludes_expired(self, ledger, user):
        ledger.store(user.id, hash_token("old"), utcnow() - timedelta(seconds=1))

        assert ledger.find_valid_by_hash(hash_token("old")) is None

    def test_find_unknown_hash(self, ledger):
        assert ledger.find_valid_by_hash(hash_token("never-issued")) is None


class TestClaim:
    def test_claim_is_single_use(self, ledger, user, future):
        ledger.store(user.id, hash_token("once"), future)

        first = ledger.claim(hash_token("once"))
        second = ledger.claim(hash_token("once"))

        assert first is not None and first.user_id == user.id
        assert second is None
        assert ledger.find_valid_by_hash(hash_token("once")) is None

    def test_claim_rejects_expired(self, ledger, user):
        ledger.store(user.id, hash_token("stale"), utcnow() - timedelta(minutes=1))

        assert ledger.claim(hash_token("stale")) is None

    def test_claim_loses_race_after_concurrent_delete(self, ledger, user, future, monkeypatch):
        """A caller that saw the record but whose DELETE hits nothing gets None."""
        ledger.store(user.id, hash_token("raced"), future)
        seen = ledger.find_valid_by_hash(hash_token("raced"))
        # another request consumes the token between lookup and delete
        ledger.delete_by_hash(hash_token("raced"))
        monkeypatch.setattr(ledger, "find_valid_by_hash", lambda token_hash: seen)

        assert ledger.claim(hash_token("raced")) is None


class TestDelete:
    def test_delete_by_hash(self, ledger, user, future):
        ledger.store(user.id, hash_token("bye"), future)

        assert ledger.delete_by_hash(hash_token("bye")) == 1
        assert ledger.delete_by_hash(hash_token("bye")) == 0

    def test_delete_all_for_user_leaves_others(self, sessions, ledger, user, future):
        other = sessions.register("other@example.com", "password123")
        for raw in ("d1", "d2", "d3"):
            ledger.store(user.id, hash_token(raw), future)
        ledger.store(other.id, hash_token("keep"), future)

        assert ledger.delete_all_for_user(user.id) == 3
        assert ledger.find_valid_by_hash(hash_token("keep")) is not None

    def test_purge_expired(self, app, ledger, user, future):
        from models import storage

        ledger.store(user.id, hash_token("expired"), utcnow() - timedelta(days=1))
        ledger.store(user.id, hash_token("live"), future)

        assert ledger.purge_expired() == 1
        assert storage.count(RefreshToken) == 1
