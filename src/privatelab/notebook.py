"""Launch of the JupyterLab server as the provisioned user."""

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import Dict, List, Literal, Mapping, NoReturn

import typer
from pydantic import BaseModel, SecretStr

from privatelab.constants import (
    CLEARED_JUPYTER_VARS,
    COMMAND_NOT_EXECUTABLE,
    COMMAND_NOT_FOUND,
    REDACTED,
)

py_logger = logging.getLogger(__name__)
cli_logger = logging.getLogger("cli_logger")


class NotebookLaunch(BaseModel):
    """How to start the notebook server for ``owner``."""

    owner: str
    home_dir: Path
    config_path: Path
    token: SecretStr = SecretStr("")
    pixi_environment: str | None = None

    def _token(self, redact: bool) -> str:
        return REDACTED if redact else self.token.get_secret_value()

    def server_command(self, redact: bool = False) -> List[str]:
        """The ``jupyter lab`` invocation. The token is given under both the legacy
        NotebookApp and the current ServerApp names.
        """
        prefix = (
            ["pixi", "run", "-e", self.pixi_environment] if self.pixi_environment else []
        )
        token = self._token(redact)
        return prefix + [
            "jupyter",
            "lab",
            f"--ServerApp.root_dir={self.home_dir}",
            "--no-browser",
            f"--config={self.config_path}",
            f"--NotebookApp.token={token}",
            f"--ServerApp.token={token}",
        ]

    def user_command(self, redact: bool = False) -> List[str]:
        """The server command wrapped in ``su`` so it runs as ``owner``."""
        return ["su", self.owner, "-c", shlex.join(self.server_command(redact=redact))]

    @staticmethod
    def environment(environ: Mapping[str, str]) -> Dict[str, str]:
        """Environment for the server, without the Jupyter path variables of the
        provisioning context.
        """
        env = dict(environ)
        for name in CLEARED_JUPYTER_VARS:
            env.pop(name, None)
        return env


def hand_off(
    command: List[str],
    env: Mapping[str, str],
    exec_mode: Literal["exec", "spawn"] = "exec",
) -> NoReturn:
    """Replace the current process with ``command``.

    Where ``exec`` is not available, or ``exec_mode`` is ``"spawn"``, the command is run
    as a child and its exit code becomes the exit code of this process.

    Raises:
        typer.Exit: in spawn mode, with the child's exit code, or when the command
            cannot be started.
    """
    can_exec = os.name == "posix" and hasattr(os, "execvpe")
    if exec_mode == "exec" and not can_exec:
        py_logger.warning("exec is not available on this platform, spawning instead")
        exec_mode = "spawn"

    try:
        if exec_mode == "exec":
            py_logger.debug(f"Exec into '{command[0]}'")
            os.execvpe(command[0], command, dict(env))
        else:
            completed = subprocess.run(command, env=dict(env), check=False)
            raise typer.Exit(exit_status(completed.returncode))
    except FileNotFoundError as e:
        cli_logger.error(f"Failed to start '{command[0]}': {e}")
        raise typer.Exit(COMMAND_NOT_FOUND)
    except OSError as e:
        cli_logger.error(f"Failed to start '{command[0]}': {e}")
        raise typer.Exit(COMMAND_NOT_EXECUTABLE)


def exit_status(returncode: int) -> int:
    """Exit status a shell would report: 128 + N for a child killed by signal N."""
    if returncode < 0:
        return 128 + abs(returncode)
    return returncode
