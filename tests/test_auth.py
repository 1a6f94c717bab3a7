"""Tests for bearer token parsing, JWKS verification and the admin guard."""

import base64
import time

import pytest
from fastapi import HTTPException
from jose import jwt

from marketplace_billing import auth

SECRET = "test-signing-secret"
KID = "key-1"


@pytest.fixture
def jwks():
    k = base64.urlsafe_b64encode(SECRET.encode()).rstrip(b"=").decode()
    return {"keys": [{"kty": "oct", "kid": KID, "alg": "HS256", "k": k}]}


def make_token(sub="user-1", kid=KID, expires_in=3600, secret=SECRET):
    claims = {"sub": sub, "exp": int(time.time()) + expires_in, "role": "authenticated"}
    headers = {"kid": kid} if kid else None
    return jwt.encode(claims, secret, algorithm="HS256", headers=headers)


class TestBearerToken:
    def test_parses_token(self):
        assert auth.parse_bearer_token("Bearer abc.def") == "abc.def"

    @pytest.mark.parametrize("header", [None, "", "Token abc", "Bearer "])
    def test_rejects_bad_header(self, header):
        with pytest.raises(HTTPException) as exc:
            auth.parse_bearer_token(header)
        assert exc.value.status_code == 401


class TestDecodeAccessToken:
    def test_valid_token(self, jwks):
        assert auth.decode_access_token(make_token(), jwks) == "user-1"

    def test_expired_token(self, jwks):
        with pytest.raises(HTTPException) as exc:
            auth.decode_access_token(make_token(expires_in=-60), jwks)
        assert exc.value.detail == "Token has expired"

    def test_unknown_key(self, jwks):
        with pytest.raises(HTTPException) as exc:
            auth.decode_access_token(make_token(kid="other"), jwks)
        assert exc.value.detail == "Invalid token: key not found"

    def test_missing_kid(self, jwks):
        with pytest.raises(HTTPException) as exc:
            auth.decode_access_token(make_token(kid=None), jwks)
        assert exc.value.detail == "Invalid token: missing key ID"

    def test_wrong_signature(self, jwks):
        with pytest.raises(HTTPException) as exc:
            auth.decode_access_token(make_token(secret="not-the-secret"), jwks)
        assert exc.value.status_code == 401

    def test_garbage(self, jwks):
        with pytest.raises(HTTPException) as exc:
            auth.decode_access_token("not-a-jwt", jwks)
        assert exc.value.status_code == 401


class TestCurrentUser:
    async def test_resolves_user(self, jwks, monkeypatch):
        monkeypatch.setattr(auth, "get_supabase_jwks", lambda: jwks)
        assert await auth.get_current_user_id(f"Bearer {make_token(sub='user-9')}") == "user-9"

    async def test_misconfigured_keys(self, monkeypatch):
        def broken():
            raise ValueError("SUPABASE_URL not configured")

        monkeypatch.setattr(auth, "get_supabase_jwks", broken)
        with pytest.raises(HTTPException) as exc:
            await auth.get_current_user_id(f"Bearer {make_token()}")
        assert exc.value.status_code == 500


class TestRequireAdmin:
    async def test_admin(self, repos):
        repos.users.roles["admin-1"] = "Admin"
        assert await auth.require_admin(user_id="admin-1", repos=repos) == "admin-1"

    @pytest.mark.parametrize("role", ["Investor", None])
    async def test_non_admin(self, repos, role):
        if role:
            repos.users.roles["user-1"] = role
        with pytest.raises(HTTPException) as exc:
            await auth.require_admin(user_id="user-1", repos=repos)
        assert exc.value.status_code == 403
