"""Filesystem path confinement."""

from code_interpreter.security.exceptions import PathSecurityError, SecureFileSystemError
from code_interpreter.security.path_validator import (
    PathSecurityConfig,
    PathValidationResult,
    PathValidator,
)
from code_interpreter.security.secure_filesystem import SecureFileSystem

__all__ = [
    "PathSecurityConfig",
    "PathSecurityError",
    "PathValidationResult",
    "PathValidator",
    "SecureFileSystem",
    "SecureFileSystemError",
]
