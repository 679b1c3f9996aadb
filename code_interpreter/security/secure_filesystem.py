"""Filesystem operations gated by ``PathValidator``."""

from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path

from code_interpreter.security.exceptions import SecureFileSystemError
from code_interpreter.security.path_validator import (
    PathSecurityConfig,
    PathValidationResult,
    PathValidator,
)


class SecureFileSystem:
    """
    Thin wrapper that validates every path before touching the disk.

    Denied paths raise ``SecureFileSystemError("Access denied: <reason>")``;
    OS failures on allowed paths are re-raised as ``SecureFileSystemError``
    with the underlying error chained.
    """

    def __init__(self, config: PathSecurityConfig) -> None:
        self._validator = PathValidator(config)
        # Directories carry no suffix, so the extension allowlist does not apply
        self._directory_validator = PathValidator(replace(config, allowed_extensions=()))

    @property
    def validator(self) -> PathValidator:
        return self._validator

    def validate_path(self, path: str | os.PathLike[str]) -> PathValidationResult:
        return self._validator.validate_path(path)

    def _checked(self, path: str | os.PathLike[str], validator: PathValidator | None = None) -> Path:
        validation = (validator or self._validator).validate_path(path)
        if not validation.allowed:
            raise SecureFileSystemError(f"Access denied: {validation.reason}")
        return Path(validation.normalized_path)

    def read_text(self, path: str | os.PathLike[str]) -> str:
        target = self._checked(path)
        try:
            return target.read_text(encoding="utf-8")
        except OSError as exc:
            raise SecureFileSystemError(f"Failed to read file: {exc}") from exc

    def write_text(self, path: str | os.PathLike[str], content: str) -> Path:
        target = self._checked(path)
        try:
            target.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise SecureFileSystemError(f"Failed to write file: {exc}") from exc
        return target

    def exists(self, path: str | os.PathLike[str]) -> bool:
        # Denied paths report False rather than revealing whether they exist
        validation = self._validator.validate_path(path)
        if not validation.allowed:
            return False
        return os.path.exists(validation.normalized_path)

    def mkdir(self, path: str | os.PathLike[str], parents: bool = True) -> Path:
        """Create a directory; existing directories are accepted."""
        target = self._checked(path, self._directory_validator)
        try:
            target.mkdir(parents=parents, exist_ok=True)
        except OSError as exc:
            raise SecureFileSystemError(f"Failed to create directory: {exc}") from exc
        return target

    def remove(self, path: str | os.PathLike[str], missing_ok: bool = True) -> None:
        target = self._checked(path)
        try:
            target.unlink(missing_ok=missing_ok)
        except OSError as exc:
            raise SecureFileSystemError(f"Failed to remove: {exc}") from exc
