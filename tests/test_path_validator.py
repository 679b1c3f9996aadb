import os

import pytest

from code_interpreter.security.exceptions import PathSecurityError
from code_interpreter.security.path_validator import PathSecurityConfig, PathValidator


@pytest.fixture
def root(tmp_path):
    return tmp_path.resolve()


def make_validator(root, **overrides):
    options = {"allowed_directories": (str(root),), "allow_temp_dir": False}
    options.update(overrides)
    return PathValidator(PathSecurityConfig(**options))


def test_path_inside_allowed_directory(root):
    result = make_validator(root).validate_path(root / "notes.txt")
    assert result.allowed
    assert result.normalized_path == str(root / "notes.txt")
    assert result.reason is None


@pytest.mark.parametrize("raw", ["", "   "])
def test_empty_path(root, raw):
    result = make_validator(root).validate_path(raw)
    assert not result.allowed
    assert result.reason == "empty path"


def test_parent_directory_access(root):
    result = make_validator(root).validate_path(f"{root}/sub/../notes.txt")
    assert result.reason == "parent directory access"


def test_parent_access_allowed_when_not_blocked(root):
    result = make_validator(root, block_parent_access=False).validate_path(f"{root}/sub/../notes.txt")
    assert result.allowed
    assert result.normalized_path == str(root / "notes.txt")


def test_forbidden_directory_wins_over_allowed(root):
    validator = make_validator(root, forbidden_directories=(str(root / "secret"),))
    result = validator.validate_path(root / "secret" / "key.txt")
    assert result.reason == "Path is in forbidden directory"


def test_outside_allowed_directories(root):
    result = make_validator(root).validate_path("/opt/elsewhere/file.txt")
    assert result.reason == "Path is not in allowed directories"


def test_sibling_prefix_is_not_inside(root):
    result = make_validator(root).validate_path(f"{root}-other/file.txt")
    assert result.reason == "Path is not in allowed directories"


def test_depth_limit(root):
    validator = make_validator(root, max_depth=2)
    assert validator.validate_path(root / "a" / "b.txt").allowed
    assert validator.validate_path(root / "a" / "b" / "c.txt").reason == "depth limit exceeded"


def test_extension_allowlist(root):
    validator = make_validator(root, allowed_extensions=(".ts", ".JS"))
    assert validator.validate_path(root / "main.ts").allowed
    assert validator.validate_path(root / "main.js").allowed
    assert validator.validate_path(root / "main.py").reason == "extension not allowed"


def test_symlink_is_rejected(root):
    target = root / "target.txt"
    target.write_text("x")
    link = root / "link.txt"
    os.symlink(target, link)
    assert make_validator(root).validate_path(link).reason == "Symlinks are not allowed"


def test_restrict_to_home(root, monkeypatch):
    home = root / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    validator = make_validator(root, restrict_to_home=True)
    assert validator.validate_path(home / "ok.txt").allowed
    assert validator.validate_path(root / "away.txt").reason == "Path is outside home directory"


def test_disabled_validator_allows_everything(root):
    validator = PathValidator(PathSecurityConfig(enabled=False))
    result = validator.validate_path("/etc/../etc/passwd")
    assert result.allowed
    assert result.normalized_path == "/etc/passwd"


def test_none_path_raises(root):
    with pytest.raises(PathSecurityError):
        make_validator(root).validate_path(None)


@pytest.mark.parametrize("config,message", [
    (PathSecurityConfig(), "At least one allowed directory"),
    (PathSecurityConfig(allowed_directories=("/",), max_depth=0), "Maximum depth"),
    (PathSecurityConfig(allowed_directories=("/does/not/exist",)), "does not exist"),
])
def test_invalid_config_raises(config, message):
    with pytest.raises(PathSecurityError, match=message):
        PathValidator(config)
