"""Creation of the container user and group matching the external identity."""

import os
from typing import Dict, List, Mapping

from privatelab.config import Identity
from privatelab.runner import CommandRunner, StepResult


def groupadd_command(identity: Identity) -> List[str]:
    command = ["groupadd", identity.group]
    if identity.gid is not None:
        command += ["-g", str(identity.gid)]
    return command


def useradd_command(identity: Identity) -> List[str]:
    """``useradd`` without a home directory (-M), joined to the identity's group. No
    password is set, so the account cannot log in interactively.
    """
    command = ["useradd", "-M"]
    if identity.uid is not None:
        command += ["-u", str(identity.uid)]
    command += ["-G", identity.group, identity.owner]
    return command


def provisioning_environ(environ: Mapping[str, str], extra_path: str) -> Dict[str, str]:
    """Copy of ``environ`` whose PATH also contains ``extra_path``."""
    env = dict(environ)
    path = env.get("PATH", "")
    if extra_path and extra_path not in path.split(os.pathsep):
        env["PATH"] = f"{path}{os.pathsep}{extra_path}" if path else extra_path
    return env


def create_group(
    identity: Identity, runner: CommandRunner, env: Mapping[str, str] | None = None
) -> StepResult:
    return runner.run("groupadd", groupadd_command(identity), env=env)


def create_user(
    identity: Identity, runner: CommandRunner, env: Mapping[str, str] | None = None
) -> StepResult:
    return runner.run("useradd", useradd_command(identity), env=env)
