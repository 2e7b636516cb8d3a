import shlex
from pathlib import Path
from unittest.mock import patch

import pytest
import typer
from pydantic import SecretStr

from privatelab.constants import COMMAND_NOT_EXECUTABLE, COMMAND_NOT_FOUND, REDACTED
from privatelab.notebook import NotebookLaunch, hand_off


class HandedOff(Exception):
    """Stands in for a successful exec, which never returns."""


@pytest.fixture
def launch() -> NotebookLaunch:
    return NotebookLaunch(
        owner="alice",
        home_dir=Path("/home/alice"),
        config_path=Path("/usr/local/etc/jupyter_notebook_config.py"),
        token=SecretStr("jupyter-secret"),
        pixi_environment="ml",
    )


def test_server_command(launch):
    assert launch.server_command() == [
        "pixi",
        "run",
        "-e",
        "ml",
        "jupyter",
        "lab",
        "--ServerApp.root_dir=/home/alice",
        "--no-browser",
        "--config=/usr/local/etc/jupyter_notebook_config.py",
        "--NotebookApp.token=jupyter-secret",
        "--ServerApp.token=jupyter-secret",
    ]


def test_server_command_without_pixi(launch):
    launch.pixi_environment = None
    assert launch.server_command()[:2] == ["jupyter", "lab"]


def test_user_command_runs_as_owner(launch):
    command = launch.user_command()
    assert command[:3] == ["su", "alice", "-c"]
    assert shlex.split(command[3]) == launch.server_command()


def test_redacted_commands(launch):
    command = " ".join(launch.user_command(redact=True))
    assert "jupyter-secret" not in command
    assert f"--ServerApp.token={REDACTED}" in command


def test_environment_clears_jupyter_paths():
    env = NotebookLaunch.environment(
        {"JUPYTER_PATH": "/a", "JUPYTER_CONFIG_DIR": "/b", "JUPYTER_TOKEN": "t"}
    )
    assert env == {"JUPYTER_TOKEN": "t"}


def test_hand_off_execs(launch):
    command = launch.user_command()
    with patch("os.execvpe", side_effect=HandedOff) as mock_exec:
        with pytest.raises(HandedOff):
            hand_off(command, {"HOME": "/home/alice"})
    mock_exec.assert_called_once_with("su", command, {"HOME": "/home/alice"})


def test_hand_off_missing_executable():
    with patch("os.execvpe", side_effect=FileNotFoundError("no su")):
        with pytest.raises(typer.Exit) as exc_info:
            hand_off(["su", "alice", "-c", "true"], {})
    assert exc_info.value.exit_code == COMMAND_NOT_FOUND


def test_hand_off_spawn_propagates_exit_code(completed):
    with patch("subprocess.run", return_value=completed(3)) as mock_run:
        with pytest.raises(typer.Exit) as exc_info:
            hand_off(["su", "alice", "-c", "false"], {}, exec_mode="spawn")
    mock_run.assert_called_once()
    assert exc_info.value.exit_code == 3


def test_hand_off_not_executable():
    with patch("os.execvpe", side_effect=OSError(8, "Exec format error")):
        with pytest.raises(typer.Exit) as exc_info:
            hand_off(["su", "alice", "-c", "true"], {})
    assert exc_info.value.exit_code == COMMAND_NOT_EXECUTABLE


def test_hand_off_spawn_killed_by_signal(completed):
    with patch("subprocess.run", return_value=completed(-15)):
        with pytest.raises(typer.Exit) as exc_info:
            hand_off(["su", "alice", "-c", "sleep 60"], {}, exec_mode="spawn")
    assert exc_info.value.exit_code == 143
