"""
Input validation helpers shared by the services.
"""

import re

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str) -> bool:
    """Check that an email address has a ``local@domain.tld`` shape."""
    return bool(EMAIL_PATTERN.match(email or ""))
