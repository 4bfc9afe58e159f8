import jwt

from library_api.shared.auth import TokenService
from library_api.shared.logger import JohnWickLogger

logger = JohnWickLogger(name="TestTokenService", log_file=None)


def make_service(**kwargs) -> TokenService:
    return TokenService(secret="test-secret", logger=logger, **kwargs)


def test_issue_then_verify_returns_claims():
    tokens = make_service()
    token = tokens.issue({"username": "mluukkai", "id": "abc123"})

    claims = tokens.verify(token)
    assert claims["username"] == "mluukkai"
    assert claims["id"] == "abc123"
    assert claims["exp"] - claims["iat"] == 3600


def test_expired_token_is_rejected():
    tokens = make_service()
    token = tokens.issue({"id": "abc123"}, ttl=-10)

    assert tokens.verify(token) is None


def test_token_signed_with_other_secret_is_rejected():
    forged = jwt.encode({"id": "abc123"}, "not-the-secret", algorithm="HS256")

    assert make_service().verify(forged) is None


def test_garbage_token_is_rejected():
    assert make_service().verify("not-a-token") is None


def test_claims_from_header_accepts_bearer_prefix_in_any_case():
    tokens = make_service()
    token = tokens.issue({"id": "abc123"})

    assert tokens.claims_from_header(f"Bearer {token}")["id"] == "abc123"
    assert tokens.claims_from_header(f"bearer {token}")["id"] == "abc123"


def test_claims_from_header_ignores_missing_or_other_schemes():
    tokens = make_service()
    token = tokens.issue({"id": "abc123"})

    assert tokens.claims_from_header(None) is None
    assert tokens.claims_from_header("") is None
    assert tokens.claims_from_header(f"Basic {token}") is None
