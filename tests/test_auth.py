from datetime import datetime, timedelta, timezone

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from jose import jwt

from auth import ALGORITHM, extract_bearer_token, issue_token, verify_token
from conftest import TEST_JWT_SECRET
from errors import AuthError, ConfigError
from settings import Settings, get_settings
from main import app

PROTECTED_ROUTES = [
    ("get", "/protected"),
    ("get", "/api/user/saved-jobs"),
    ("put", "/api/user/save-job/1"),
    ("put", "/api/user/unsave-job/1"),
]


def _expired_token(user_id: int = 1) -> str:
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    return jwt.encode(
        {"id": user_id, "iat": past, "exp": past + timedelta(seconds=3600)},
        TEST_JWT_SECRET,
        algorithm=ALGORITHM,
    )


# --- Login --- #

def test_login_returns_token_for_protected_route(test_client: TestClient):
    """A token from login authenticates as the user created at registration."""
    created = test_client.post("/api/user", json={"email": "a@x.com", "password": "secret1"}).json()

    login = test_client.post("/api/user/login", json={"email": "a@x.com", "password": "secret1"})
    assert login.status_code == status.HTTP_200_OK
    body = login.json()
    assert body["message"] == "Login successful."
    assert body["token"]

    response = test_client.get("/protected", headers={"Authorization": f"Bearer {body['token']}"})
    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == f"User {created['id']} authenticated"


def test_login_token_claims(test_client: TestClient):
    test_client.post("/api/user", json={"email": "a@x.com", "password": "secret1"})
    token = test_client.post("/api/user/login", json={"email": "a@x.com", "password": "secret1"}).json()["token"]

    claims = jwt.decode(token, TEST_JWT_SECRET, algorithms=[ALGORITHM])
    assert claims["exp"] - claims["iat"] == 3600


def test_login_mismatch_does_not_leak(test_client: TestClient):
    """Wrong password and unknown email get the same answer."""
    test_client.post("/api/user", json={"email": "a@x.com", "password": "secret1"})

    wrong_password = test_client.post("/api/user/login", json={"email": "a@x.com", "password": "nope"})
    unknown_email = test_client.post("/api/user/login", json={"email": "b@x.com", "password": "secret1"})

    for response in (wrong_password, unknown_email):
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"message": "Email and password do not match."}


def test_login_missing_fields(test_client: TestClient):
    response = test_client.post("/api/user/login", json={"email": "a@x.com"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"message": "Email and password are required."}


def test_login_without_secret_is_500(test_client: TestClient):
    test_client.post("/api/user", json={"email": "a@x.com", "password": "secret1"})
    app.dependency_overrides[get_settings] = lambda: Settings(jwt_secret=None, password_hash_rounds=4)

    response = test_client.post("/api/user/login", json={"email": "a@x.com", "password": "secret1"})
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"message": "Internal server error."}


# --- Bearer token checks --- #

@pytest.mark.parametrize("method,path", PROTECTED_ROUTES)
def test_missing_token_is_unauthorized(test_client: TestClient, method, path):
    for headers in ({}, {"Authorization": "Bearer"}, {"Authorization": ""}):
        response = getattr(test_client, method)(path, headers=headers)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"message": "Unauthorized."}


@pytest.mark.parametrize("method,path", PROTECTED_ROUTES)
def test_expired_token_rejected(test_client: TestClient, method, path):
    response = getattr(test_client, method)(path, headers={"Authorization": f"Bearer {_expired_token()}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"message": "Token expired."}


@pytest.mark.parametrize("method,path", PROTECTED_ROUTES)
def test_invalid_token_rejected(test_client: TestClient, method, path):
    forged = issue_token(1, "some-other-secret")
    for token in ("garbage", forged):
        response = getattr(test_client, method)(path, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"message": "Invalid token."}


def test_protected_without_secret_is_500(test_client: TestClient):
    token = issue_token(1, TEST_JWT_SECRET)
    app.dependency_overrides[get_settings] = lambda: Settings(jwt_secret=None)

    response = test_client.get("/protected", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"message": "Internal server error."}


def test_missing_token_checked_before_secret(test_client: TestClient):
    app.dependency_overrides[get_settings] = lambda: Settings(jwt_secret=None)

    response = test_client.get("/protected")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


# --- Pure helpers --- #

def test_verify_token_roundtrip():
    identity = verify_token(issue_token(42, "s3cret", expires_in=60), "s3cret")
    assert identity.user_id == 42


def test_verify_token_errors():
    with pytest.raises(ConfigError):
        verify_token("anything", None)
    with pytest.raises(AuthError, match="Token expired."):
        verify_token(_expired_token(), TEST_JWT_SECRET)
    with pytest.raises(AuthError, match="Invalid token."):
        verify_token("not.a.jwt", TEST_JWT_SECRET)


def test_issue_token_requires_secret():
    with pytest.raises(ConfigError):
        issue_token(1, "")


def test_extract_bearer_token():
    assert extract_bearer_token("Bearer abc") == "abc"
    assert extract_bearer_token("Token abc") == "abc"
    assert extract_bearer_token("Bearer") is None
    assert extract_bearer_token("Bearer ") is None
    assert extract_bearer_token(None) is None
