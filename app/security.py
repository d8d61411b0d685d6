"""
Security utilities: password hashing and verification-code generation.

1. PASSWORD HASHING (Argon2)
   - Passwords are never stored in plaintext
   - We use passlib's CryptContext for safe, high-level Argon2 operations;
     "deprecated='auto'" lets old hashes keep verifying if the scheme changes

2. VERIFICATION CODES
   - Opaque, URL-safe bearer tokens from the `secrets` CSPRNG
   - A code authorizes exactly one thing: activating the account it was
     issued to, which is why it must be unpredictable
"""

import secrets

from passlib.context import CryptContext

from app.config import settings


pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    """
    Hash a plaintext password using Argon2id.

    Returns:
        An Argon2 hash string (e.g., "$argon2id$v=19$m=65536,t=3,p=4$...").
    """
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against a stored Argon2 hash."""
    return pwd_context.verify(plain_password, hashed_password)


def generate_verification_code() -> str:
    """Generate a fresh verification code for account activation."""
    return secrets.token_urlsafe(settings.VERIFICATION_CODE_BYTES)
