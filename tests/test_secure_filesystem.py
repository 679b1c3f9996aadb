import pytest

from code_interpreter.security.exceptions import SecureFileSystemError
from code_interpreter.security.path_validator import PathSecurityConfig
from code_interpreter.security.secure_filesystem import SecureFileSystem


@pytest.fixture
def root(tmp_path):
    return tmp_path.resolve()


@pytest.fixture
def fs(root):
    return SecureFileSystem(
        PathSecurityConfig(
            allowed_directories=(str(root),),
            allow_temp_dir=False,
            allowed_extensions=(".ts", ".js"),
        )
    )


def test_write_then_read(fs, root):
    target = fs.write_text(root / "main.ts", "const a = 1;")
    assert target == root / "main.ts"
    assert fs.read_text(root / "main.ts") == "const a = 1;"
    assert fs.exists(root / "main.ts")


def test_write_outside_allowed_directories_is_denied(fs):
    with pytest.raises(SecureFileSystemError, match="Access denied: Path is not in allowed directories"):
        fs.write_text("/opt/elsewhere/main.ts", "x")


def test_extension_is_enforced_for_files(fs, root):
    with pytest.raises(SecureFileSystemError, match="extension not allowed"):
        fs.write_text(root / "notes.txt", "x")


def test_mkdir_ignores_extension_allowlist(fs, root):
    created = fs.mkdir(root / "nested" / "dir")
    assert created.is_dir()
    fs.mkdir(root / "nested" / "dir")


def test_exists_is_false_for_denied_paths(fs):
    assert not fs.exists("/etc/passwd")


def test_read_missing_file_raises(fs, root):
    with pytest.raises(SecureFileSystemError, match="Failed to read file"):
        fs.read_text(root / "missing.js")


def test_remove(fs, root):
    fs.write_text(root / "main.js", "1")
    fs.remove(root / "main.js")
    assert not (root / "main.js").exists()
    fs.remove(root / "main.js")
    with pytest.raises(SecureFileSystemError, match="Failed to remove"):
        fs.remove(root / "main.js", missing_ok=False)
