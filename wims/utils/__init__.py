"""
Utility functions for WIMS.
"""

from .encryption import (
    decrypt_data,
    encrypt_data,
    generate_encryption_key,
    hash_password,
    verify_password,
)
from .logger import (
    AuditLogger,
    WimsLogger,
    get_audit_logger,
    get_logger,
    reset_loggers,
)
from .validators import (
    is_valid_email,
)

__all__ = [
    # Encryption
    "generate_encryption_key",
    "encrypt_data",
    "decrypt_data",
    "hash_password",
    "verify_password",
    # Logging
    "WimsLogger",
    "AuditLogger",
    "get_logger",
    "get_audit_logger",
    "reset_loggers",
    # Validation
    "is_valid_email",
]
