"""
Encryption utilities for WIMS.

Fernet helpers for encrypted local storage and PBKDF2 password hashing
for locally registered accounts.
"""

import hashlib
import secrets
from typing import Optional, Tuple

from cryptography.fernet import Fernet

PBKDF2_ITERATIONS = 100000


def generate_encryption_key() -> str:
    """
    Generate a new Fernet key for encrypting local storage.

    Returns:
        URL-safe base64 key as a string
    """
    return Fernet.generate_key().decode('utf-8')


def encrypt_data(data: bytes, key: str) -> bytes:
    """Encrypt data using Fernet symmetric encryption."""
    return Fernet(key.encode('utf-8')).encrypt(data)


def decrypt_data(encrypted_data: bytes, key: str) -> bytes:
    """
    Decrypt data using Fernet symmetric encryption.

    Raises:
        cryptography.fernet.InvalidToken: If the key is wrong or data was tampered with
    """
    return Fernet(key.encode('utf-8')).decrypt(encrypted_data)


def hash_password(password: str, salt: Optional[bytes] = None) -> Tuple[str, str]:
    """
    Hash a password using PBKDF2-HMAC-SHA256.

    Args:
        password: Password to hash
        salt: Optional salt (generated if not provided)

    Returns:
        Tuple of (hex password hash, hex salt), ready for JSON storage
    """
    if salt is None:
        salt = secrets.token_bytes(16)

    password_hash = hashlib.pbkdf2_hmac(
        'sha256',
        password.encode('utf-8'),
        salt,
        iterations=PBKDF2_ITERATIONS
    )

    return password_hash.hex(), salt.hex()


def verify_password(password: str, password_hash: str, salt: str) -> bool:
    """
    Verify a password against a stored hash.

    Args:
        password: Password to verify
        password_hash: Stored hex hash
        salt: Stored hex salt

    Returns:
        True if password matches
    """
    computed_hash, _ = hash_password(password, bytes.fromhex(salt))
    return secrets.compare_digest(computed_hash, password_hash)
