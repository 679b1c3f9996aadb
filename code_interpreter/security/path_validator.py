"""
Path confinement for sandbox file operations.

Checks run in a fixed order and the first failing check decides the reason:
empty path, parent traversal, forbidden directory, allowed directories,
depth, extension, symlink, home directory.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from code_interpreter.security.exceptions import PathSecurityError


@dataclass(frozen=True)
class PathSecurityConfig:
    """Confinement rules applied by ``PathValidator``."""

    enabled: bool = True
    allowed_directories: tuple[str, ...] = ()
    forbidden_directories: tuple[str, ...] = ()
    restrict_to_home: bool = False
    allow_temp_dir: bool = True
    block_parent_access: bool = True
    max_depth: int = 10
    allowed_extensions: tuple[str, ...] = ()


@dataclass(frozen=True)
class PathValidationResult:
    """Verdict for a single candidate path."""

    allowed: bool
    normalized_path: str
    reason: str | None = None


def _is_within(path: str, directory: str) -> bool:
    # Component-wise containment; "/tmpfoo" is not inside "/tmp"
    try:
        return os.path.commonpath([path, directory]) == directory
    except ValueError:
        return False


class PathValidator:
    """Validate candidate paths against a ``PathSecurityConfig``."""

    def __init__(self, config: PathSecurityConfig) -> None:
        self.validate_config(config)
        self._config = config
        self._home_dir = os.path.realpath(Path.home())
        self._temp_dir = os.path.realpath(tempfile.gettempdir())

    @property
    def config(self) -> PathSecurityConfig:
        return self._config

    @staticmethod
    def validate_config(config: PathSecurityConfig) -> None:
        """Raise ``PathSecurityError`` if an enabled config is unusable."""
        if not config.enabled:
            return
        if not config.allowed_directories:
            raise PathSecurityError("At least one allowed directory must be specified")
        if config.max_depth < 1:
            raise PathSecurityError("Maximum depth must be at least 1")
        for directory in config.allowed_directories:
            resolved = os.path.abspath(directory)
            if not os.path.exists(resolved):
                raise PathSecurityError(f"Allowed directory does not exist: {resolved}")

    def validate_path(self, input_path: str | os.PathLike[str] | None) -> PathValidationResult:
        if input_path is None:
            raise PathSecurityError("Path cannot be None")

        raw = os.fspath(input_path)
        if not self._config.enabled:
            return PathValidationResult(allowed=True, normalized_path=self._normalize(raw))

        if not raw or not raw.strip():
            return PathValidationResult(allowed=False, normalized_path="", reason="empty path")

        normalized = self._normalize(raw)

        if self._config.block_parent_access and ".." in raw:
            return self._deny(normalized, "parent directory access")
        if self._in_forbidden_directory(normalized):
            return self._deny(normalized, "Path is in forbidden directory")
        if not self._in_allowed_directory(normalized):
            return self._deny(normalized, "Path is not in allowed directories")
        if self._exceeds_max_depth(normalized):
            return self._deny(normalized, "depth limit exceeded")
        if not self._has_allowed_extension(normalized):
            return self._deny(normalized, "extension not allowed")
        if os.path.islink(normalized):
            return self._deny(normalized, "Symlinks are not allowed")
        if self._config.restrict_to_home and not _is_within(normalized, self._home_dir):
            return self._deny(normalized, "Path is outside home directory")

        return PathValidationResult(allowed=True, normalized_path=normalized)

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    @staticmethod
    def _normalize(path: str) -> str:
        # Resolve the parent so platform temp symlinks (/var -> /private/var)
        # compare equal, while a symlink at the leaf is still detectable
        absolute = os.path.abspath(path)
        parent, name = os.path.split(absolute)
        return os.path.join(os.path.realpath(parent), name) if name else os.path.realpath(absolute)

    @staticmethod
    def _deny(normalized: str, reason: str) -> PathValidationResult:
        return PathValidationResult(allowed=False, normalized_path=normalized, reason=reason)

    def _resolved_dirs(self, directories: tuple[str, ...]) -> list[str]:
        return [os.path.realpath(d) for d in directories]

    def _in_forbidden_directory(self, path: str) -> bool:
        return any(_is_within(path, d) for d in self._resolved_dirs(self._config.forbidden_directories))

    def _in_allowed_directory(self, path: str) -> bool:
        if self._config.allow_temp_dir and _is_within(path, self._temp_dir):
            return True
        return any(_is_within(path, d) for d in self._resolved_dirs(self._config.allowed_directories))

    def _exceeds_max_depth(self, path: str) -> bool:
        for directory in self._resolved_dirs(self._config.allowed_directories):
            if _is_within(path, directory):
                relative = os.path.relpath(path, directory)
                depth = len([part for part in Path(relative).parts if part not in ("", ".")])
                return depth > self._config.max_depth
        depth = len([part for part in Path(path).parts if part != Path(path).anchor])
        return depth > self._config.max_depth

    def _has_allowed_extension(self, path: str) -> bool:
        if not self._config.allowed_extensions:
            return True
        allowed = {ext.lower() for ext in self._config.allowed_extensions}
        return Path(path).suffix.lower() in allowed
