import shutil
import sys
import tempfile
import uuid
from pathlib import Path

import pytest

from code_interpreter.config import SandboxConfig, SecurityConfig
from tests.runtimes import ECHO_SOURCE


@pytest.fixture
def make_config():
    """Build a ``SandboxConfig`` whose JavaScript runtime is a Python one-liner."""
    prefixes: list[str] = []

    def factory(script: str = ECHO_SOURCE, security: SecurityConfig | None = None, **overrides) -> SandboxConfig:
        prefix = f"ci-test-{uuid.uuid4().hex[:8]}"
        prefixes.append(prefix)
        options = {
            "javascript_command": [sys.executable, "-c", script],
            "temp_dir_prefix": prefix,
            "execution_timeout_ms": 10000,
            "terminate_grace_ms": 500,
            "security": security or SecurityConfig(),
        }
        options.update(overrides)
        return SandboxConfig(**options)

    yield factory

    for prefix in prefixes:
        shutil.rmtree(Path(tempfile.gettempdir()) / prefix, ignore_errors=True)
