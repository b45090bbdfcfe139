"""
Exception types raised by WIMS services.
"""


class WimsError(Exception):
    """Base class for WIMS errors."""
    pass


class ValidationError(WimsError, ValueError):
    """
    Raised when caller input fails a business rule.

    The message is suitable for showing to the user. No state is
    committed when this is raised.
    """
    pass


class StorageError(WimsError):
    """Raised by LocalStorage when persisted data cannot be read or written."""
    pass
