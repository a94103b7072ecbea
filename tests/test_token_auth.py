import pytest
from jose import jwt

from taskmanager_app import utils
from taskmanager_app.errors import AuthError, AuthErrorKind
from taskmanager_app.settings import settings


def test_token_roundtrip_carries_owner_id():
    token = utils.create_access_token(42)
    assert utils.decode_access_token(token) == 42

    claims = jwt.get_unverified_claims(token)
    assert claims["sub"] == "42"
    assert claims["exp"] > claims["iat"]


def test_expired_token_is_rejected():
    token = utils.create_access_token(1, expires_minutes=-1)
    with pytest.raises(AuthError) as exc:
        utils.decode_access_token(token)
    assert exc.value.kind is AuthErrorKind.EXPIRED
    assert exc.value.status_code == 401


@pytest.mark.parametrize(
    "token",
    [
        "not-a-jwt",
        jwt.encode({"sub": "1", "exp": 4102444800}, "some-other-secret", algorithm="HS256"),
        jwt.encode({"sub": "abc", "exp": 4102444800}, settings.JWT_SECRET, algorithm="HS256"),
        jwt.encode({"exp": 4102444800}, settings.JWT_SECRET, algorithm="HS256"),
    ],
)
def test_invalid_tokens_are_rejected(token):
    with pytest.raises(AuthError) as exc:
        utils.decode_access_token(token)
    assert exc.value.kind is AuthErrorKind.INVALID


def test_tampered_token_is_rejected():
    token = utils.create_access_token(7)
    header, payload, signature = token.split(".")
    forged = jwt.encode({"sub": "8", "exp": 4102444800}, "x", algorithm="HS256").split(".")[1]
    with pytest.raises(AuthError) as exc:
        utils.decode_access_token(".".join([header, forged, signature]))
    assert exc.value.kind is AuthErrorKind.INVALID


def test_password_hash_verification():
    hashed = utils.hash_password("secret1")
    assert hashed != "secret1"
    assert utils.verify_password("secret1", hashed)
    assert not utils.verify_password("secret2", hashed)
    assert not utils.verify_password("secret1", "not-a-bcrypt-hash")


# --- over HTTP ---

def test_missing_token_on_task_routes(client):
    for method, path in [("GET", "/api/tasks"), ("POST", "/api/tasks"), ("PUT", "/api/tasks/1"), ("DELETE", "/api/tasks/1")]:
        r = client.request(method, path, json={} if method in ("POST", "PUT") else None)
        assert r.status_code == 401, (method, path, r.text)
        assert r.json() == {"message": "No token, authorization denied"}


def test_non_bearer_header_counts_as_missing(client):
    r = client.get("/api/tasks", headers={"Authorization": "Basic dXNlcjpwYXNz"})
    assert r.status_code == 401
    assert r.json()["message"] == "No token, authorization denied"


def test_invalid_token_over_http(client):
    r = client.get("/api/tasks", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401
    assert r.json() == {"message": "Token is not valid"}
    assert r.headers.get("www-authenticate") == "Bearer"


def test_expired_token_over_http(client, signup):
    _, user = signup()
    token = utils.create_access_token(user["id"], expires_minutes=-1)
    r = client.get("/api/tasks", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert "expired" in r.json()["message"].lower()


def test_bearer_scheme_is_case_insensitive(client, signup):
    token, _ = signup()
    r = client.get("/api/tasks", headers={"Authorization": f"bearer {token}"})
    assert r.status_code == 200
