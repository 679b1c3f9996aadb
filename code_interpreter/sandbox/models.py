"""Data models for static analysis and sandboxed execution."""

from dataclasses import dataclass, field
from enum import Enum


class Language(str, Enum):
    """Source languages accepted by the sandbox."""

    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"

    @property
    def extension(self) -> str:
        return ".ts" if self is Language.TYPESCRIPT else ".js"


class ExecutionStatus(str, Enum):
    """Terminal state of a sandboxed execution."""

    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    KILLED = "killed"


@dataclass(frozen=True)
class AnalysisResult:
    """Verdict of the static safety analyzer."""

    safe: bool
    issues: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass
class ExecutionRequest:
    """Request to execute source code in the sandbox."""

    code: str
    language: Language = Language.JAVASCRIPT


@dataclass
class ExecutionResult:
    """Result of a sandboxed execution."""

    output: str = ""
    error: str | None = None
    execution_time_ms: int = 0
    temp_file_path: str | None = None
    status: ExecutionStatus = ExecutionStatus.COMPLETED
    exit_code: int | None = None
    truncated: bool = False


@dataclass
class SandboxStatus:
    """Point-in-time view of sandbox load and limits."""

    active_executions: int
    max_concurrent_executions: int
    analysis_enabled: bool
    execution_timeout_ms: int
    max_code_length: int
    live_processes: list[str] = field(default_factory=list)
