from fastapi import Header, HTTPException, status, Depends
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
import jwt  # PyJWT
import logging
import os
from typing import Optional
from studio.db.session import get_db
from studio.models.profile import Profile
from studio.core.token_rules import STARTING_TOKENS

logger = logging.getLogger(__name__)

# PyJWKClient caches the signing keys it fetched; one client per Supabase project
_JWKS_CLIENTS = {}
JWKS_CACHE_TTL = 3600  # Cache keys for 1 hour


def get_jwks_client(supabase_url: str) -> jwt.PyJWKClient:
    client = _JWKS_CLIENTS.get(supabase_url)
    if client is None:
        client = jwt.PyJWKClient(
            f"{supabase_url}/auth/v1/.well-known/jwks.json",
            cache_keys=True,
            lifespan=JWKS_CACHE_TTL,
            timeout=10
        )
        _JWKS_CLIENTS[supabase_url] = client
    return client


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def verify_supabase_token(authorization: Optional[str] = Header(None)) -> dict:
    """
    Verifies the Supabase JWT token.
    Supports both HS256 (Shared Secret) and ES256/RS256 (Asymmetric Key).
    Returns the payload dict if valid.
    """
    if not authorization:
        raise _unauthorized("Missing authorization header")

    if not authorization.startswith("Bearer "):
        raise _unauthorized("Invalid header format. Expected 'Bearer <token>'")

    token = authorization.replace("Bearer ", "").strip()

    # Reject common invalid token values sent by the frontend before sign-in completes
    if not token or token.lower() in ["null", "undefined", "none"]:
        raise _unauthorized("Missing token")

    if len(token.split(".")) != 3:
        raise _unauthorized("Invalid token format. Token must have header.payload.signature structure.")

    try:
        algo = jwt.get_unverified_header(token).get("alg")
    except jwt.DecodeError as e:
        logger.info("Failed to decode token header: %s", e)
        raise _unauthorized("Invalid token header")

    if algo == "HS256":
        secret = os.getenv("SUPABASE_JWT_SECRET")
        if not secret:
            logger.error("SUPABASE_JWT_SECRET is missing in environment variables")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Server misconfiguration: SUPABASE_JWT_SECRET not set"
            )
        key = secret

    elif algo in ("ES256", "RS256"):
        supabase_url = os.getenv("SUPABASE_URL")
        if not supabase_url:
            logger.error("SUPABASE_URL is missing for %s verification", algo)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Server misconfiguration: SUPABASE_URL not set"
            )
        try:
            key = get_jwks_client(supabase_url.rstrip("/")).get_signing_key_from_jwt(token).key
        except jwt.PyJWKClientConnectionError as e:
            logger.warning("Could not fetch JWKS: %s", e)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Authentication service temporarily unavailable. Please try again in a moment."
            )
        except jwt.PyJWKClientError as e:
            logger.info("No signing key for token: %s", e)
            raise _unauthorized("Invalid token signature")

    else:
        logger.info("Unsupported token algorithm: %s", algo)
        raise _unauthorized(f"Unsupported token algorithm: {algo}")

    try:
        # Decode AND verify in one step; the payload is used as-is afterwards
        payload = jwt.decode(
            token,
            key,
            algorithms=[algo],
            audience="authenticated",
            options={"verify_aud": True}
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except jwt.InvalidTokenError as e:
        logger.info("%s verification failed: %s", algo, e)
        raise _unauthorized("Invalid token signature")

    return payload


def get_current_profile_id(
    payload: dict = Depends(verify_supabase_token),
    db: Session = Depends(get_db)
) -> str:
    """
    FastAPI dependency that verifies the Supabase token and returns the profile id.
    This is the main dependency to use in route handlers.

    Auto-creates the profile (with the starting token balance) on the first request
    after sign-up, so new users never hit a 404.
    """
    profile_id = payload.get("sub")
    email = payload.get("email")

    if not profile_id:
        raise _unauthorized("Token missing user ID claim")
    if not email:
        raise _unauthorized("Token missing email claim")

    try:
        exists = db.query(Profile.id).filter(Profile.id == profile_id).first()
        if exists:
            return profile_id

        metadata = payload.get("user_metadata") or {}
        profile = Profile(
            id=profile_id,
            email=email.lower(),
            full_name=metadata.get("full_name"),
            tokens=STARTING_TOKENS,
            subscription_type="free"
        )
        db.add(profile)
        db.commit()
        logger.info("Auto-created profile %s for %s with %s tokens (lazy sync)", profile_id, email, STARTING_TOKENS)
        return profile_id
    except IntegrityError:
        # A concurrent request created the same profile first
        db.rollback()
        if db.query(Profile.id).filter(Profile.id == profile_id).first():
            return profile_id
        logger.error("Profile %s could not be created: email %s already belongs to another profile", profile_id, email)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered to another account"
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Database error while resolving profile %s: %s", profile_id, e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database temporarily unavailable. Please try again in a moment."
        )
