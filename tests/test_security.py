"""Unit tests for the security helpers (hashing, digests, key pairs, JWTs)."""

from datetime import timedelta

import jwt
import pytest

from utils.exceptions import InternalError
from utils.security import (
    SigningKeys,
    build_password_hasher,
    create_access_token,
    decode_access_token,
    generate_refresh_token,
    hash_password,
    hash_token,
    utcnow,
    verify_password,
)


@pytest.fixture
def ph():
    return build_password_hasher(time_cost=1, memory_cost=8, parallelism=1)


class TestPasswordHashing:
    def test_hash_is_not_plaintext_and_salted(self, ph):
        first = hash_password(ph, "password123")
        second = hash_password(ph, "password123")

        assert first != "password123"
        assert first.startswith("$argon2id$")
        assert first != second

    def test_verify_accepts_correct_password(self, ph):
        assert verify_password(ph, "password123", hash_password(ph, "password123"))

    def test_verify_rejects_wrong_password(self, ph):
        assert verify_password(ph, "wrong-password", hash_password(ph, "password123")) is False

    def test_corrupt_hash_is_internal_error(self, ph):
        with pytest.raises(InternalError):
            verify_password(ph, "password123", "not-a-hash")


class TestRefreshTokenDigest:
    def test_digest_is_deterministic_sha256(self):
        assert hash_token("abc") == hash_token("abc")
        assert hash_token("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"

    def test_generated_tokens_are_unique_and_long(self):
        tokens = {generate_refresh_token() for _ in range(50)}
        assert len(tokens) == 50
        # 32 random bytes -> 43 url-safe characters
        assert all(len(t) >= 43 for t in tokens)


class TestSigningKeys:
    def test_round_trip_through_files(self, tmp_path, signing_keys):
        private_path = tmp_path / "private.pem"
        public_path = tmp_path / "public.pem"
        private_path.write_bytes(signing_keys.private_pem)
        public_path.write_bytes(signing_keys.public_pem)

        loaded = SigningKeys.from_files(str(private_path), str(public_path))

        assert loaded == signing_keys

    def test_missing_file_is_internal_error(self, tmp_path):
        with pytest.raises(InternalError):
            SigningKeys.from_files(str(tmp_path / "nope.pem"), str(tmp_path / "nope.pub"))

    def test_garbage_pem_is_internal_error(self, tmp_path):
        bad = tmp_path / "bad.pem"
        bad.write_bytes(b"-----BEGIN PUBLIC KEY-----\nzzz\n-----END PUBLIC KEY-----\n")
        with pytest.raises(InternalError):
            SigningKeys.from_files(None, str(bad))

    def test_verify_only_keys_cannot_sign(self, signing_keys):
        with pytest.raises(InternalError):
            create_access_token(signing_keys.verify_only(), "user-1", "a@x.com", timedelta(minutes=15))


class TestAccessTokens:
    def test_claims_and_expiry(self, signing_keys):
        now = utcnow()
        token = create_access_token(signing_keys, "user-1", "a@x.com", timedelta(minutes=15), now=now)

        claims = decode_access_token(signing_keys, token)

        assert claims["sub"] == "user-1"
        assert claims["email"] == "a@x.com"
        assert claims["iat"] == int(now.timestamp())
        assert claims["exp"] - claims["iat"] == 900

    def test_signed_with_rs256(self, signing_keys):
        token = create_access_token(signing_keys, "user-1", "a@x.com", timedelta(minutes=15))
        assert jwt.get_unverified_header(token)["alg"] == "RS256"

    def test_other_key_pair_is_rejected(self, signing_keys):
        token = create_access_token(SigningKeys.generate(), "user-1", "a@x.com", timedelta(minutes=15))
        with pytest.raises(jwt.InvalidSignatureError):
            decode_access_token(signing_keys, token)

    def test_expired_token_is_rejected(self, signing_keys):
        token = create_access_token(
            signing_keys, "user-1", "a@x.com", timedelta(minutes=15), now=utcnow() - timedelta(hours=1)
        )
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(signing_keys, token)
