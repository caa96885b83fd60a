"""Exception taxonomy for bref-cli."""

from __future__ import annotations

from typing import Optional


class BrefCliError(RuntimeError):
    """Base class for every failure the CLI reports and exits 1 on."""

    pass


class ToolNotFound(BrefCliError):
    """Raised when a required external executable cannot be resolved."""

    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(f"Required tool '{tool}' was not found on PATH")


class CommandFailed(BrefCliError):
    """Raised when a pipeline stage's process exits before it completed."""

    def __init__(self, stage: str, exit_code: int, stderr: str = "") -> None:
        self.stage = stage
        self.exit_code = exit_code
        self.stderr = stderr
        message = f"Stage '{stage}' failed with exit code {exit_code}"
        if stderr.strip():
            message += f":\n{stderr.strip()}"
        super().__init__(message)


class ExtractionError(BrefCliError):
    """Raised when a required fact is missing from captured command output."""

    def __init__(self, fact: str) -> None:
        self.fact = fact
        super().__init__(f"Could not find '{fact}' in the command output")


class StackNotFound(BrefCliError):
    def __init__(self, name: str, region: Optional[str]) -> None:
        self.name = name
        self.region = region
        super().__init__(
            f"Stack '{name}' does not exist in region {region or '(default)'}"
        )


class ApiError(BrefCliError):
    """A remote API call failed; carries the provider message verbatim."""

    def __init__(
        self,
        message: str,
        stack: Optional[str] = None,
        region: Optional[str] = None,
    ) -> None:
        self.message = message
        self.stack = stack
        self.region = region
        context = []
        if stack:
            context.append(f"stack '{stack}'")
        if region:
            context.append(f"region {region}")
        prefix = f"AWS error ({', '.join(context)})" if context else "AWS error"
        super().__init__(f"{prefix}: {message}")


class PipelineCancelled(BrefCliError):
    """The user interrupted a running stage."""

    def __init__(self, stage: str) -> None:
        self.stage = stage
        super().__init__(f"Cancelled during stage '{stage}'")


class InvocationError(BrefCliError):
    def __init__(self, function: str, message: str) -> None:
        self.function = function
        super().__init__(f"Invocation of '{function}' failed: {message}")


class ScaffoldError(BrefCliError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Refusing to overwrite existing file: {path}")


class ShortUrlError(BrefCliError):
    pass


class ConfigError(BrefCliError):
    """The configuration file could not be parsed."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Invalid configuration file {path}: {message}")
