"""Exceptions raised by the execution sandbox."""


class SandboxError(Exception):
    """Base class for sandbox errors."""


class AdmissionError(SandboxError):
    """A request was refused before any process was spawned."""


class ConcurrencyLimitError(AdmissionError):
    """All execution slots are taken; retry after backoff."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__("Maximum concurrent executions reached. Please try again later.")


class CodeTooLongError(AdmissionError):
    """Submitted source exceeds the configured length ceiling."""

    def __init__(self, length: int, limit: int) -> None:
        self.length = length
        self.limit = limit
        super().__init__(
            f"Code length exceeds maximum allowed size of {limit} characters"
        )


class SecurityCheckError(AdmissionError):
    """Static analysis rejected the submitted source."""

    def __init__(self, issues: tuple[str, ...] | list[str]) -> None:
        self.issues = tuple(issues)
        super().__init__(f"Security check failed: {', '.join(self.issues)}")
