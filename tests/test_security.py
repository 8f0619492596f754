# tests/test_security.py

from datetime import timedelta

import pytest

from app.core.exceptions import (
    InvalidTokenSignatureError,
    RandomnessError,
    SigningKeyMissingError,
    TokenExpiredError,
)
from app.core.security import TokenIssuer, generate_opaque_token
from app.schemas.referral import CreateCodeRequest, parse_duration
from app.utils.passwords import hash_password, verify_password


def test_access_token_round_trip():
    issuer = TokenIssuer("key-one")
    token = issuer.issue_access_token("user-42", timedelta(minutes=5))

    assert issuer.verify_access_token(token) == "user-42"


def test_access_token_signed_with_other_key_is_rejected():
    token = TokenIssuer("key-one").issue_access_token("user-42", timedelta(minutes=5))

    with pytest.raises(InvalidTokenSignatureError):
        TokenIssuer("key-two").verify_access_token(token)


def test_expired_access_token_is_rejected():
    issuer = TokenIssuer("key-one")
    token = issuer.issue_access_token("user-42", timedelta(seconds=-10))

    with pytest.raises(TokenExpiredError):
        issuer.verify_access_token(token)


def test_garbage_token_is_rejected():
    with pytest.raises(InvalidTokenSignatureError):
        TokenIssuer("key-one").verify_access_token("not.a.jwt")


def test_missing_signing_key_is_fatal():
    with pytest.raises(SigningKeyMissingError):
        TokenIssuer("")


def test_opaque_tokens_are_random():
    tokens = {generate_opaque_token() for _ in range(50)}
    assert len(tokens) == 50


def test_entropy_failure_is_reported(mocker):
    mocker.patch("app.core.security.secrets.token_urlsafe", side_effect=OSError("no entropy"))

    with pytest.raises(RandomnessError):
        generate_opaque_token()


def test_password_hashing():
    password_hash = hash_password("Secret")

    assert verify_password("Secret", password_hash)
    assert not verify_password("secret", password_hash)


@pytest.mark.parametrize("raw, seconds", [
    ("90s", 90),
    ("15m", 900),
    ("1h30m", 5400),
    ("24h", 86400),
])
def test_parse_duration(raw, seconds):
    assert parse_duration(raw) == timedelta(seconds=seconds)


@pytest.mark.parametrize("raw", ["", "abc", "10", "0s", "1h-5m"])
def test_parse_duration_rejects_invalid(raw):
    with pytest.raises(ValueError):
        parse_duration(raw)


def test_create_code_request_accepts_duration_string():
    assert CreateCodeRequest(ttl="2h").ttl == timedelta(hours=2)


def test_password_hashes_are_salted_per_hash():
    first = hash_password("Secret")
    second = hash_password("Secret")

    assert first != second
    assert verify_password("Secret", first)
    assert verify_password("Secret", second)
