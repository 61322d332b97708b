"""Exceptions raised while composing the deployment."""
from typing import Iterable


class CompositionError(Exception):
    """Base class for failures that abort a composition pass."""
    pass


class ConfigurationError(CompositionError):
    """Raised when stack configuration is malformed."""
    pass


class MissingConfigError(ConfigurationError):
    """Raised when required configuration keys are absent."""

    def __init__(self, keys: Iterable[str]):
        self.keys = sorted(keys)
        joined = ", ".join(f"'{k}'" for k in self.keys)
        super().__init__(f"Missing required configuration: {joined}")


class FoundationResolutionError(CompositionError):
    """Raised when the foundation stack does not expose an expected output."""
    pass


class BuildError(CompositionError):
    """Raised when the function artifact could not be built."""

    def __init__(self, message: str, stdout: str = "", stderr: str = ""):
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(message)
