"""Static safety analysis and subprocess sandbox for TypeScript/JavaScript code."""

from code_interpreter.sandbox.analyzer import CodeAnalyzer
from code_interpreter.sandbox.exceptions import (
    AdmissionError,
    CodeTooLongError,
    ConcurrencyLimitError,
    SandboxError,
    SecurityCheckError,
)
from code_interpreter.sandbox.executor import CodeExecutor
from code_interpreter.sandbox.manager import SandboxManager
from code_interpreter.sandbox.models import (
    AnalysisResult,
    ExecutionRequest,
    ExecutionResult,
    ExecutionStatus,
    Language,
)

__all__ = [
    "AdmissionError",
    "AnalysisResult",
    "CodeAnalyzer",
    "CodeExecutor",
    "CodeTooLongError",
    "ConcurrencyLimitError",
    "ExecutionRequest",
    "ExecutionResult",
    "ExecutionStatus",
    "Language",
    "SandboxError",
    "SandboxManager",
    "SecurityCheckError",
]
