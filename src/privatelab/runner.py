import logging
import shlex
import subprocess
from pathlib import Path
from typing import List, Mapping

from pydantic import BaseModel

from privatelab.constants import COMMAND_NOT_EXECUTABLE, COMMAND_NOT_FOUND
from privatelab.exceptions import StepFailedError

py_logger = logging.getLogger(__name__)
cli_logger = logging.getLogger("cli_logger")


class StepResult(BaseModel):
    """Outcome of a single bootstrap step. In-process steps have an empty command."""

    name: str
    command: List[str] = []
    returncode: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs the external tools of the bootstrap sequence.

    Failures are reported through the returned :class:`StepResult` and never stop the
    sequence, unless ``strict`` is set, in which case :class:`StepFailedError` is raised.
    The tools' own stdout/stderr are not captured, so they end up in the container logs.
    """

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict

    def run(
        self,
        name: str,
        command: List[str],
        cwd: str | Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> StepResult:
        py_logger.debug(f"Running step '{name}': {shlex.join(command)}")
        if cwd is not None and not Path(cwd).is_dir():
            cli_logger.error(f"Cannot run '{command[0]}': '{cwd}' is not a directory")
            result = StepResult(name=name, command=command, returncode=1)
            self.check(result)
            return result

        try:
            completed = subprocess.run(
                command,
                cwd=cwd,
                env=dict(env) if env is not None else None,
                check=False,
            )
            returncode = completed.returncode
        except FileNotFoundError as e:
            cli_logger.error(f"'{command[0]}' not found. Is it installed on the image? {e}")
            returncode = COMMAND_NOT_FOUND
        except PermissionError as e:
            cli_logger.error(f"'{command[0]}' could not be executed: {e}")
            returncode = COMMAND_NOT_EXECUTABLE
        except OSError as e:
            cli_logger.error(f"'{command[0]}' could not be started: {e}")
            returncode = COMMAND_NOT_EXECUTABLE

        result = StepResult(name=name, command=command, returncode=returncode)
        self.check(result)
        return result

    def check(self, result: StepResult) -> StepResult:
        """Logs a failed step and raises on it in strict mode."""
        if result.ok:
            return result
        cli_logger.error(f"Step '{result.name}' failed with exit code {result.returncode}")
        if self.strict:
            raise StepFailedError(result)
        return result
