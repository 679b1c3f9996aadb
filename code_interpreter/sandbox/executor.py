"""
High-level code execution interface.

Orchestrates: admission limits → static safety analysis → subprocess sandbox.
This is the single entry point consumed by the execution tools.
"""

from __future__ import annotations

import time
from uuid import uuid4

from structlog import get_logger
from structlog.typing import FilteringBoundLogger

from code_interpreter.config import SandboxConfig, get_settings
from code_interpreter.sandbox.analyzer import CodeAnalyzer
from code_interpreter.sandbox.exceptions import (
    CodeTooLongError,
    ConcurrencyLimitError,
    SecurityCheckError,
)
from code_interpreter.sandbox.manager import SandboxManager
from code_interpreter.sandbox.models import (
    AnalysisResult,
    ExecutionRequest,
    ExecutionResult,
    ExecutionStatus,
    Language,
    SandboxStatus,
)


class CodeExecutor:
    """
    Facade that combines admission control, security analysis and execution.

    Usage::

        executor = CodeExecutor()
        result = await executor.execute('console.log("hi")', Language.JAVASCRIPT)
        executor.shutdown()

    ``execute`` raises only ``AdmissionError`` subclasses. Runtime failures,
    timeouts and spawn errors come back as an ``ExecutionResult`` with
    ``error`` set.
    """

    def __init__(
        self,
        config: SandboxConfig | None = None,
        analyzer: CodeAnalyzer | None = None,
        manager: SandboxManager | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._config = config or get_settings().sandbox
        self._logger = logger or get_logger()
        self._analyzer = analyzer or CodeAnalyzer(
            timeout_seconds=self._config.security.analysis_timeout_seconds,
            logger=self._logger,
        )
        self._manager = manager or SandboxManager(self._config, logger=self._logger)
        # Admitted execution ids; one slot per id from admission to settle
        self._admitted: set[str] = set()

    @property
    def active_count(self) -> int:
        return len(self._admitted)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def execute(
        self,
        code: str,
        language: Language | str = Language.JAVASCRIPT,
    ) -> ExecutionResult:
        """
        Validate and execute code in a child process.

        Args:
            code: TypeScript or JavaScript source.
            language: Runtime to execute the source with.

        Returns:
            ``ExecutionResult`` with output, error, timing and temp file path.

        Raises:
            ConcurrencyLimitError: All execution slots are taken.
            CodeTooLongError: ``code`` exceeds the configured length.
            SecurityCheckError: Static analysis found blocking issues.
        """
        language = Language(language)
        security = self._config.security

        if self.active_count >= self._config.max_concurrent_executions:
            raise ConcurrencyLimitError(self._config.max_concurrent_executions)

        if len(code) > security.max_code_length:
            raise CodeTooLongError(len(code), security.max_code_length)

        # Reserve the slot before the first await so concurrent callers see it
        execution_id = self._new_execution_id()
        self._admitted.add(execution_id)
        log = self._logger.bind(execution_id=execution_id, language=language.value)

        try:
            if security.enable_sandbox_analysis:
                self._check_analysis(await self._analyzer.analyze(code), log)

            start = time.perf_counter()
            result = await self._manager.run(
                ExecutionRequest(code=code, language=language), execution_id
            )
            if result.status is not ExecutionStatus.TIMED_OUT:
                result.execution_time_ms = int((time.perf_counter() - start) * 1000)

            log.info(
                "Code execution finished",
                status=result.status.value,
                exit_code=result.exit_code,
                execution_time_ms=result.execution_time_ms,
            )
            return result
        finally:
            self._admitted.discard(execution_id)

    async def analyze(self, code: str) -> AnalysisResult:
        """Run the static analyzer without executing anything."""
        return await self._analyzer.analyze(code)

    def shutdown(self) -> None:
        """Signal every live child and release all slots without waiting."""
        self._logger.info(
            "Shutting down execution sandbox",
            active_executions=self.active_count,
        )
        self._manager.terminate_all()
        self._admitted.clear()

    def status(self) -> SandboxStatus:
        return SandboxStatus(
            active_executions=self.active_count,
            max_concurrent_executions=self._config.max_concurrent_executions,
            analysis_enabled=self._config.security.enable_sandbox_analysis,
            execution_timeout_ms=self._config.execution_timeout_ms,
            max_code_length=self._config.security.max_code_length,
            live_processes=self._manager.live_execution_ids,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_analysis(analysis: AnalysisResult, log: FilteringBoundLogger) -> None:
        if not analysis.safe:
            log.warning("Code blocked by security analysis", issues=list(analysis.issues))
            raise SecurityCheckError(analysis.issues)
        if analysis.warnings:
            log.warning("Code analysis warnings", warnings=list(analysis.warnings))

    @staticmethod
    def _new_execution_id() -> str:
        return f"exec_{int(time.time() * 1000)}_{uuid4().hex}"
