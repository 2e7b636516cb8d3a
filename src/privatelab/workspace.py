"""Operations on the shared workspace directory."""

import logging
from pathlib import Path
from typing import List, Mapping

from validators import url

from privatelab.runner import CommandRunner, StepResult

py_logger = logging.getLogger(__name__)
cli_logger = logging.getLogger("cli_logger")


def clone_command(location: str) -> List[str]:
    return ["git", "clone", location]


def clone_repository(
    location: str,
    workspace: Path,
    runner: CommandRunner,
    env: Mapping[str, str] | None = None,
) -> StepResult:
    """Clone ``location`` inside ``workspace``. The clone ends up in a sub-directory named
    after the repository, as ``git clone`` decides.
    """
    cli_logger.info(f"Git Repo {location} requested...")
    if not url(location):
        # scp-like locations (git@host:org/repo.git) and local paths are valid for git
        cli_logger.info(f"Cloning '{location}' as an scp-style location or local path")
    return runner.run("clone", clone_command(location), cwd=workspace, env=env)


def chown_command(owner: str, workspace: Path) -> List[str]:
    # "owner:" also sets the group to the owner's login group
    return ["chown", "-R", f"{owner}:", str(workspace)]


def chown_workspace(
    owner: str,
    workspace: Path,
    runner: CommandRunner,
    env: Mapping[str, str] | None = None,
) -> StepResult:
    """Give ``owner`` the workspace, so that notebooks can be created there."""
    return runner.run("chown-workspace", chown_command(owner, workspace), env=env)
