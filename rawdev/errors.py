"""Domain-specific errors for rawdev."""


class RawDeviceError(Exception):
    """Base error for rawdev."""


class ConfigurationError(RawDeviceError):
    """Raised when a session cannot be built from the given address/options."""


class TransportError(RawDeviceError):
    """Raised when a transport cannot be opened, written or read."""
