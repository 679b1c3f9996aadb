"""End-to-end scenarios against a real Node.js runtime."""

import asyncio

import pytest

from code_interpreter.config import SandboxConfig
from code_interpreter.sandbox.exceptions import SecurityCheckError
from code_interpreter.sandbox.executor import CodeExecutor
from code_interpreter.sandbox.models import ExecutionStatus, Language
from tests.runtimes import requires_node

pytestmark = requires_node


@pytest.fixture
def executor():
    executor = CodeExecutor(SandboxConfig(max_concurrent_executions=3))
    yield executor
    executor.shutdown()


@pytest.mark.asyncio
async def test_console_output_is_captured(executor):
    result = await executor.execute('console.log("hi")', Language.JAVASCRIPT)
    assert "hi" in result.output
    assert result.error is None
    assert result.status is ExecutionStatus.COMPLETED


@pytest.mark.asyncio
async def test_eval_is_rejected_before_execution(executor):
    with pytest.raises(SecurityCheckError, match="Security check failed") as excinfo:
        await executor.execute('eval("1+1")', Language.JAVASCRIPT)
    assert "eval" in str(excinfo.value)


@pytest.mark.asyncio
async def test_uncaught_exception_populates_error(executor):
    result = await executor.execute('throw new Error("x")', Language.JAVASCRIPT)
    assert result.status is ExecutionStatus.FAILED
    assert "Error: x" in result.error
    assert result.exit_code != 0


@pytest.mark.asyncio
async def test_concurrent_executions_do_not_interleave(executor):
    first, second = await asyncio.gather(
        executor.execute('for (let i = 0; i < 3; i++) console.log("left-" + i);', Language.JAVASCRIPT),
        executor.execute('for (let i = 0; i < 3; i++) console.log("right-" + i);', Language.JAVASCRIPT),
    )
    assert first.output.split() == ["left-0", "left-1", "left-2"]
    assert second.output.split() == ["right-0", "right-1", "right-2"]
