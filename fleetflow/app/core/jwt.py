"""
JWT token utilities for authentication.

This module provides functions for encoding and decoding JWT tokens.
Access tokens and password-reset tokens share the signing key but carry a
different ``type`` claim so one can never be used in place of the other.
"""

import time
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from fleetflow.app.core.config import settings

ACCESS_TOKEN_TYPE = "access"
RESET_TOKEN_TYPE = "password_reset"


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Data payload to encode in the token (should include: sub, user_id, role)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string

    Example payload:
        {
            "sub": "raja@gmail.com",
            "user_id": 3,
            "role": "Safety Officer",
            "type": "access",
            "iat": 1767225600.25,
            "exp": 1767229200
        }
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.access_token_expire_minutes)

    # Sub-second issue time so revocation by timestamp can tell apart
    # a token issued just before a password change from one issued after.
    to_encode.update({"exp": expire, "iat": time.time(), "type": ACCESS_TOKEN_TYPE})
    encoded_jwt = jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)

    return encoded_jwt


def create_reset_token(user_id: int, email: str) -> str:
    """Create a short-lived token authorizing a single password reset."""
    expire = datetime.utcnow() + timedelta(minutes=settings.reset_token_expire_minutes)
    to_encode = {
        "sub": email,
        "user_id": user_id,
        "type": RESET_TOKEN_TYPE,
        "iat": time.time(),
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and validate a JWT access token.

    Args:
        token: JWT token string to decode

    Returns:
        Decoded token payload if valid (includes: sub, user_id, role, iat, exp), None otherwise
    """
    payload = _decode(token)
    if payload is None or payload.get("type") != ACCESS_TOKEN_TYPE:
        return None
    return payload


def decode_reset_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode a password-reset token, returning None when invalid or expired."""
    payload = _decode(token)
    if payload is None or payload.get("type") != RESET_TOKEN_TYPE:
        return None
    return payload


def _decode(token: str) -> Optional[Dict[str, Any]]:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
