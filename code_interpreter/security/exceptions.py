"""Exceptions for filesystem confinement."""


class PathSecurityError(Exception):
    """Invalid confinement configuration or unusable path input."""


class SecureFileSystemError(Exception):
    """A filesystem operation was denied or failed behind the validator."""
