"""
Configuration management for the Code Interpreter service.
Supports environment variables and .env files.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SecurityConfig(BaseSettings):
    """Static analysis and admission limits."""

    model_config = SettingsConfigDict(env_prefix="SECURITY_")

    enable_sandbox_analysis: bool = Field(
        default=True,
        description="Run the static safety analyzer before every execution"
    )
    max_code_length: int = Field(
        default=50000,
        ge=1,
        description="Maximum accepted source length in characters"
    )
    analysis_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Time budget for a single static analysis"
    )


class SandboxConfig(BaseSettings):
    """Child process execution configuration."""

    model_config = SettingsConfigDict(env_prefix="SANDBOX_")

    max_concurrent_executions: int = Field(
        default=3,
        ge=1,
        description="Maximum number of simultaneously running child processes"
    )
    execution_timeout_ms: int = Field(
        default=30000,
        ge=1,
        description="Wall-clock limit for one execution in milliseconds"
    )
    temp_dir_prefix: str = Field(
        default="mcp-code-interpreter",
        description="Directory under the OS temp dir that holds source files"
    )

    # Runtime commands; the source file path is appended as the last argument
    javascript_command: list[str] = Field(default_factory=lambda: ["node"])
    typescript_command: list[str] = Field(default_factory=lambda: ["npx", "tsx"])

    env_allowlist: list[str] = Field(
        default_factory=lambda: ["PATH", "HOME", "SYSTEMROOT"],
        description="Parent environment variables passed through to children"
    )
    terminate_grace_ms: int = Field(
        default=2000,
        ge=0,
        description="Wait after SIGTERM before a timed out child is killed"
    )
    max_output_bytes: int = Field(
        default=1_048_576,
        ge=1,
        description="Bytes kept per stream; further output is drained and dropped"
    )

    security: SecurityConfig = Field(default_factory=SecurityConfig)


class ServerConfig(BaseSettings):
    """Server configuration."""

    model_config = SettingsConfigDict(env_prefix="SERVER_")

    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    workers: int = Field(default=1, description="Number of workers")


class ToolsConfig(BaseSettings):
    """Tool executor configuration."""

    model_config = SettingsConfigDict(env_prefix="TOOLS_")

    # Must exceed the sandbox execution timeout so the sandbox reports its own timeout
    call_timeout: float = Field(default=120.0, description="Timeout per tool call in seconds")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__"
    )

    app_name: str = "typescript-javascript-code-interpreter"
    app_version: str = "2.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = Field(default=False, description="Debug mode")

    sandbox: SandboxConfig = Field(default_factory=SandboxConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)

    @field_validator("debug", mode="before")
    @classmethod
    def validate_debug(cls, v: str | bool) -> bool:
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes", "on")
        return False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
