"""
VetDesk Backend — Password Hashing and Session Tokens
=======================================================

Passwords are stored as PBKDF2-SHA256 strings:

    pbkdf2_sha256$<iterations>$<salt_hex>$<hash_hex>

The iteration count travels with each hash, so raising
PASSWORD_HASH_ITERATIONS only affects newly set passwords.

Session cookies carry a random URL-safe token. Only its SHA-256 digest is
stored in the sessions table.
"""

import hashlib
import hmac
import os
import secrets

from vetdesk.config import settings

PASSWORD_SCHEME = "pbkdf2_sha256"


def hash_password(password: str) -> str:
    salt = os.urandom(16)
    iterations = settings.password_hash_iterations
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{PASSWORD_SCHEME}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    """Constant-time comparison against a stored PBKDF2 string."""
    if not stored or not stored.startswith(f"{PASSWORD_SCHEME}$"):
        return False
    try:
        _, iterations_raw, salt_hex, hash_hex = stored.split("$", 3)
        iterations = int(iterations_raw)
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(hash_hex)
    except ValueError:
        return False

    computed = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(computed, expected)


def new_session_token() -> str:
    return secrets.token_urlsafe(32)


def hash_session_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
