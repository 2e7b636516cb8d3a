"""Exceptions raised while bootstrapping the container."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from privatelab.runner import StepResult


class ConfigurationError(ValueError):
    """Raised when the environment or the settings file cannot be turned into a valid
    configuration.
    """


class StepFailedError(RuntimeError):
    """Raised in strict mode when a bootstrap step exits with a non-zero code."""

    def __init__(self, result: "StepResult") -> None:
        self.result = result
        super().__init__(
            f"Step '{result.name}' failed with exit code {result.returncode}"
        )
