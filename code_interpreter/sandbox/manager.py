"""
Subprocess sandbox manager for TypeScript/JavaScript execution.

Lifecycle per execution:
  1. Write the source into ``<tmp>/<prefix>/<execution_id>.<ext>`` through the
     confined filesystem
  2. Spawn the language runtime with a minimal environment
  3. Stream stdout / stderr into per-execution buffers capped at
     ``max_output_bytes``, raced against the wall-clock timeout
  4. On timeout, SIGTERM the child's process group, then SIGKILL after a
     grace period; the streams are drained until the child is gone
  5. Remove the source file, whatever the outcome

All execution failures are returned as ``ExecutionResult`` values; nothing
in this module raises for a misbehaving child.
"""

from __future__ import annotations

import asyncio
import os
import signal
import tempfile
from pathlib import Path

from structlog import get_logger
from structlog.typing import FilteringBoundLogger

from code_interpreter.config import SandboxConfig
from code_interpreter.sandbox.models import (
    ExecutionRequest,
    ExecutionResult,
    ExecutionStatus,
    Language,
)
from code_interpreter.security.exceptions import SecureFileSystemError
from code_interpreter.security.path_validator import PathSecurityConfig
from code_interpreter.security.secure_filesystem import SecureFileSystem

SANDBOX_ENV_MARKER = ("NODE_ENV", "sandbox")
NO_OUTPUT_MARKER = "Code executed successfully (no output)"
SHUTDOWN_MESSAGE = "Execution terminated: sandbox is shutting down"

_POSIX = os.name != "nt"
_READ_CHUNK = 4096
# Bound on waiting for pipes to close once the child has been killed
_SETTLE_SECONDS = 2.0


def _temp_security_config() -> PathSecurityConfig:
    return PathSecurityConfig(
        enabled=True,
        allowed_directories=(tempfile.gettempdir(),),
        forbidden_directories=("/etc", "/usr", "/System", "/bin", "/sbin"),
        restrict_to_home=False,
        allow_temp_dir=True,
        block_parent_access=True,
        max_depth=10,
        allowed_extensions=tuple(language.extension for language in Language),
    )


async def _pump(stream: asyncio.StreamReader | None, sink: _OutputBuffer) -> None:
    if stream is None:
        return
    while True:
        chunk = await stream.read(_READ_CHUNK)
        if not chunk:
            break
        sink.append(chunk)


class _OutputBuffer:
    """Keeps the first ``limit`` bytes of a stream; the rest is read and dropped."""

    def __init__(self, limit: int) -> None:
        self._limit = limit
        self._chunks: list[bytes] = []
        self._size = 0
        self.truncated = False

    def append(self, chunk: bytes) -> None:
        room = self._limit - self._size
        if len(chunk) > room:
            self.truncated = True
            chunk = chunk[:room]
        if chunk:
            self._chunks.append(chunk)
            self._size += len(chunk)

    def decode(self) -> str:
        return b"".join(self._chunks).decode("utf-8", errors="replace")


class SandboxManager:
    """
    Owns child processes and their temp files.

    Live processes are tracked by execution id from spawn until they settle,
    so ``terminate_all`` can reach them during shutdown.
    """

    def __init__(
        self,
        config: SandboxConfig,
        logger: FilteringBoundLogger | None = None,
        filesystem: SecureFileSystem | None = None,
    ) -> None:
        self._config = config
        self._logger = logger or get_logger()
        self._fs = filesystem or SecureFileSystem(_temp_security_config())
        self._temp_dir = Path(tempfile.gettempdir()) / config.temp_dir_prefix
        self._processes: dict[str, asyncio.subprocess.Process] = {}
        self._terminated: set[str] = set()

    @property
    def temp_dir(self) -> Path:
        return self._temp_dir

    @property
    def live_execution_ids(self) -> list[str]:
        return list(self._processes)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def run(self, request: ExecutionRequest, execution_id: str) -> ExecutionResult:
        """Materialize, spawn and supervise one execution."""
        temp_file = self._temp_dir / f"{execution_id}{request.language.extension}"
        try:
            try:
                self._fs.mkdir(self._temp_dir)
                self._fs.write_text(temp_file, request.code)
            except SecureFileSystemError as exc:
                self._logger.error(
                    "Failed to materialize source file",
                    execution_id=execution_id,
                    temp_file=str(temp_file),
                    error=str(exc),
                )
                return ExecutionResult(
                    error=f"Execution error: {exc}",
                    status=ExecutionStatus.FAILED,
                )

            command = [*self._command_for(request.language), str(temp_file)]
            result = await self._spawn_and_wait(command, execution_id)
            result.temp_file_path = str(temp_file)
            return result
        finally:
            self._processes.pop(execution_id, None)
            self._terminated.discard(execution_id)
            self._cleanup(temp_file)

    async def _spawn_and_wait(self, command: list[str], execution_id: str) -> ExecutionResult:
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=os.getcwd(),
                env=self._child_env(),
                start_new_session=_POSIX,
            )
        except OSError as exc:
            self._logger.error(
                "Failed to spawn runtime",
                execution_id=execution_id,
                command=command[0],
                error=str(exc),
            )
            return ExecutionResult(
                error=f"Execution error: {exc}",
                status=ExecutionStatus.FAILED,
            )

        self._processes[execution_id] = process
        self._logger.debug("Runtime spawned", execution_id=execution_id, pid=process.pid)

        stdout = _OutputBuffer(self._config.max_output_bytes)
        stderr = _OutputBuffer(self._config.max_output_bytes)
        # Readers run until the pipes close, including while the child is being stopped
        pumps = [
            asyncio.create_task(_pump(process.stdout, stdout)),
            asyncio.create_task(_pump(process.stderr, stderr)),
        ]
        waiter = asyncio.create_task(process.wait())
        tasks = [*pumps, waiter]
        timeout_ms = self._config.execution_timeout_ms

        try:
            _, pending = await asyncio.wait(tasks, timeout=timeout_ms / 1000)
            if pending:
                self._logger.warning(
                    "Execution timed out", execution_id=execution_id, timeout_ms=timeout_ms
                )
                await self._stop(process, waiter)
                await self._settle(tasks, execution_id)
                return ExecutionResult(
                    output=stdout.decode(),
                    error=f"Execution timeout after {timeout_ms}ms",
                    execution_time_ms=timeout_ms,
                    status=ExecutionStatus.TIMED_OUT,
                    exit_code=process.returncode,
                    truncated=stdout.truncated or stderr.truncated,
                )
        finally:
            for task in tasks:
                task.cancel()
            if process.returncode is None:
                self._send(process, signal.SIGKILL if _POSIX else signal.SIGTERM)

        exit_code = waiter.result()
        output, errors = stdout.decode(), stderr.decode()
        truncated = stdout.truncated or stderr.truncated

        if execution_id in self._terminated:
            return ExecutionResult(
                output=output,
                error=SHUTDOWN_MESSAGE,
                status=ExecutionStatus.KILLED,
                exit_code=exit_code,
                truncated=truncated,
            )

        if exit_code == 0:
            return ExecutionResult(
                output=output or NO_OUTPUT_MARKER,
                status=ExecutionStatus.COMPLETED,
                exit_code=exit_code,
                truncated=truncated,
            )

        return ExecutionResult(
            output=output,
            error=errors or f"Process exited with code {exit_code}",
            status=ExecutionStatus.FAILED,
            exit_code=exit_code,
            truncated=truncated,
        )

    # ------------------------------------------------------------------
    # Termination
    # ------------------------------------------------------------------

    def terminate_all(self) -> None:
        """Send SIGTERM to every live child and forget them; does not wait."""
        for execution_id, process in list(self._processes.items()):
            self._terminated.add(execution_id)
            try:
                self._send(process, signal.SIGTERM)
                self._logger.debug("Killed active execution", execution_id=execution_id)
            except OSError as exc:
                self._logger.error(
                    "Error killing active execution",
                    execution_id=execution_id,
                    error=str(exc),
                )
        self._processes.clear()

    async def _stop(self, process: asyncio.subprocess.Process, waiter: asyncio.Task) -> None:
        """SIGTERM the child, then SIGKILL once the grace period runs out."""
        self._send(process, signal.SIGTERM)
        done, _ = await asyncio.wait([waiter], timeout=self._config.terminate_grace_ms / 1000)
        if not done:
            self._send(process, signal.SIGKILL if _POSIX else signal.SIGTERM)

    async def _settle(self, tasks: list[asyncio.Task], execution_id: str) -> None:
        _, pending = await asyncio.wait(tasks, timeout=_SETTLE_SECONDS)
        if pending:
            self._logger.warning(
                "Child output pipes still open after kill", execution_id=execution_id
            )

    @staticmethod
    def _send(process: asyncio.subprocess.Process, sig: int) -> None:
        """Signal the child's process group; a no-op once it has exited."""
        if process.returncode is not None:
            return
        try:
            if _POSIX:
                os.killpg(process.pid, sig)
            elif sig == signal.SIGTERM:
                process.terminate()
            else:
                process.kill()
        except ProcessLookupError:
            pass

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _command_for(self, language: Language) -> list[str]:
        if language is Language.TYPESCRIPT:
            return list(self._config.typescript_command)
        return list(self._config.javascript_command)

    def _child_env(self) -> dict[str, str]:
        env = {
            key: os.environ[key]
            for key in self._config.env_allowlist
            if key in os.environ
        }
        key, value = SANDBOX_ENV_MARKER
        env[key] = value
        return env

    def _cleanup(self, temp_file: Path) -> None:
        try:
            self._fs.remove(temp_file)
            self._logger.debug("Temporary file cleaned up", temp_file=str(temp_file))
        except SecureFileSystemError as exc:
            self._logger.error(
                "Failed to cleanup temporary file",
                temp_file=str(temp_file),
                error=str(exc),
            )
