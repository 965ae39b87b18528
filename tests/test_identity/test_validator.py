"""Tests for session-token validation and claim extraction."""
from __future__ import annotations

import time

import jwt
import pytest

from contract_authz.identity import (
    SessionClaims,
    SessionTokenConfig,
    SessionTokenValidator,
    ValidationError,
    validate_and_extract,
)
from contract_authz.identity.validator import _extract_claims
from contract_authz.settings import Settings


CONFIG = SessionTokenConfig(secret="test-secret-0123456789-abcdefghij", issuer="contract-authz", audience="contract-authz-api", leeway_seconds=0)


def _token(secret: str = "test-secret-0123456789-abcdefghij", **overrides) -> str:
    now = int(time.time())
    payload = {"sub": "u-1", "iss": "contract-authz", "aud": "contract-authz-api", "iat": now, "exp": now + 60}
    payload.update(overrides)
    payload = {k: v for k, v in payload.items() if v is not None}
    return jwt.encode(payload, secret, algorithm="HS256")


def test_extract_claims():
    claims = _extract_claims({"sub": " u-1 ", "company_id": "c-1", "email": "a@example.com"})
    assert claims == SessionClaims(user_id="u-1", company_id="c-1", email="a@example.com")
    assert claims.to_dict() == {"user_id": "u-1", "company_id": "c-1", "email": "a@example.com"}


def test_extract_claims_requires_subject():
    with pytest.raises(ValidationError):
        _extract_claims({"sub": "  "})


def test_valid_token():
    claims = SessionTokenValidator(CONFIG).validate_and_extract(_token(company_id="c-9"))
    assert claims.user_id == "u-1"
    assert claims.company_id == "c-9"


def test_module_level_helper():
    assert validate_and_extract(_token(), CONFIG).user_id == "u-1"


def test_issue_round_trips():
    validator = SessionTokenValidator(CONFIG)
    assert validator.validate_and_extract(validator.issue("u-7", company_id="c-1")).company_id == "c-1"


@pytest.mark.parametrize(
    "token",
    [
        _token(secret="wrong-secret-0123456789-abcdefghij"),
        _token(iss="someone-else"),
        _token(aud="another-api"),
        _token(exp=int(time.time()) - 10),
        _token(exp=None),
        "not-a-jwt",
    ],
    ids=["signature", "issuer", "audience", "expired", "no-exp", "garbage"],
)
def test_invalid_tokens_are_rejected(token):
    with pytest.raises(ValidationError):
        SessionTokenValidator(CONFIG).validate_and_extract(token)


def test_other_algorithms_are_rejected():
    token = jwt.encode({"sub": "u-1", "exp": int(time.time()) + 60}, "test-secret-0123456789-abcdefghij", algorithm="HS512")
    with pytest.raises(ValidationError):
        SessionTokenValidator(CONFIG).validate_and_extract(token)


def test_config_from_settings():
    config = SessionTokenConfig.from_settings(Settings(token_secret=" s3cret ", token_leeway_seconds=5))
    assert config.secret == "s3cret"
    assert config.leeway_seconds == 5
    assert config.algorithm == "HS256"


def test_config_requires_secret():
    with pytest.raises(ValueError):
        SessionTokenConfig.from_settings(Settings(token_secret=None))
