"""Request authentication: Supabase access tokens verified against the project JWKS"""
import json
import logging
from functools import lru_cache
from typing import Optional

import httpx
from fastapi import Depends, Header, HTTPException
from jose import JWTError, jwt

from marketplace_billing.api.dependencies import get_repositories
from marketplace_billing.config import SUPABASE_URL
from marketplace_billing.features.pricing.domain import UserType
from marketplace_billing.infra.supabase.repositories import RepositoryFactory

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
DEFAULT_ALGORITHM = "RS256"

if not SUPABASE_URL:
    logger.warning("SUPABASE_URL not set - authentication will fail")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail)


@lru_cache(maxsize=1)
def get_supabase_jwks() -> dict:
    """
    Public signing keys of the Supabase project, fetched once per process

    Raises:
        ValueError: SUPABASE_URL missing or the JWKS endpoint unreachable
    """
    if not SUPABASE_URL:
        raise ValueError("SUPABASE_URL not configured")

    jwks_url = f"{SUPABASE_URL}/auth/v1/.well-known/jwks.json"
    try:
        response = httpx.get(jwks_url, timeout=10.0)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Failed to fetch JWKS from {jwks_url}: {e}")
        raise ValueError(f"Failed to fetch Supabase JWKS: {e}")

    jwks = response.json()
    logger.info(f"Loaded {len(jwks.get('keys', []))} signing keys from {jwks_url}")
    return jwks


def parse_bearer_token(authorization: Optional[str]) -> str:
    """Token part of an ``Authorization: Bearer <token>`` header"""
    if not authorization:
        logger.warning("No Authorization header provided")
        raise _unauthorized("Authorization header is required")
    if not authorization.startswith(BEARER_PREFIX):
        logger.warning(f"Invalid Authorization header format: {authorization[:20]}...")
        raise _unauthorized("Authorization header must start with 'Bearer '")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise _unauthorized("Authorization header is required")
    return token


def find_signing_key(jwks: dict, kid: Optional[str]) -> dict:
    if not kid:
        raise _unauthorized("Invalid token: missing key ID")

    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return key

    logger.warning(f"No matching key found for kid: {kid}")
    raise _unauthorized("Invalid token: key not found")


def decode_access_token(token: str, jwks: dict) -> str:
    """
    Verify ``token`` against ``jwks`` and return its subject (the user ID)

    Supabase access tokens carry no audience we check against, so ``aud``
    verification is off; signature and expiry are always verified.

    Raises:
        HTTPException(401): Malformed, expired or wrongly signed token
    """
    try:
        header = jwt.get_unverified_header(token)
        key = find_signing_key(jwks, header.get("kid"))
        payload = jwt.decode(
            token,
            json.dumps(key),
            algorithms=[key.get("alg", DEFAULT_ALGORITHM)],
            options={"verify_signature": True, "verify_exp": True, "verify_aud": False},
        )
    except jwt.ExpiredSignatureError:
        logger.warning("Token has expired")
        raise _unauthorized("Token has expired")
    except jwt.JWTClaimsError as e:
        logger.warning(f"JWT claims validation failed: {e}")
        raise _unauthorized("Invalid token claims")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized("Invalid authentication token")

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Invalid token: missing user ID")
    return user_id


async def get_current_user_id(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> str:
    """
    FastAPI dependency resolving the authenticated user's ID

    Raises:
        HTTPException(401): Missing or invalid token
        HTTPException(500): Signing keys cannot be loaded
    """
    token = parse_bearer_token(authorization)

    try:
        jwks = get_supabase_jwks()
    except ValueError as e:
        logger.error(f"Authentication misconfigured: {e}")
        raise HTTPException(status_code=500, detail="Authentication is not properly configured")

    user_id = decode_access_token(token, jwks)
    logger.debug(f"Authenticated user: {user_id}")
    return user_id


async def require_admin(
    user_id: str = Depends(get_current_user_id),
    repos: RepositoryFactory = Depends(get_repositories)
) -> str:
    """
    Require the authenticated user to have the Admin role

    Returns:
        The admin's user ID

    Raises:
        HTTPException(403): User is not an admin
    """
    role = await repos.users.get_role(user_id)
    if role != UserType.ADMIN.value:
        logger.warning(f"User {user_id} with role {role} attempted an admin operation")
        raise HTTPException(status_code=403, detail="Admin access required")
    return user_id
