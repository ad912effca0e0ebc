"""
SCNG LLDP - Exceptions.

Transport failures are not raised here; sessions record them in
``session.error`` and the client moves to the FAILED state.
"""


class LldpError(Exception):
    """Base exception for LLDP discovery."""
    pass


class AlreadyInitializedError(LldpError):
    """Raised when initializing a client that is ready or still fetching."""
    pass


class UninitializedAccessError(LldpError):
    """Raised when reading LLDP data before initialization succeeded."""
    pass


class ConfigError(LldpError):
    """Raised for invalid session or agent configuration."""
    pass
