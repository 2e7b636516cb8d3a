"""The container entrypoint sequence: optional clone, account provisioning, secret
scrubbing and hand-off to JupyterLab running as the provisioned user.
"""

import logging
import os
import shlex
from typing import List, MutableMapping

from pydantic import BaseModel

from privatelab.accounts import (
    create_group,
    create_user,
    groupadd_command,
    provisioning_environ,
    useradd_command,
)
from privatelab.config import BootstrapConfig
from privatelab.constants import CLEARED_JUPYTER_VARS, SECRET_VAR
from privatelab.notebook import NotebookLaunch, hand_off
from privatelab.runner import CommandRunner, StepResult
from privatelab.secret import scrubbed_secret
from privatelab.shell import ensure_prompt_line
from privatelab.workspace import chown_command, chown_workspace, clone_command, clone_repository

py_logger = logging.getLogger(__name__)
cli_logger = logging.getLogger("cli_logger")


class BootstrapReport(BaseModel):
    steps: List[StepResult] = []
    provisioned: bool = False
    launch: NotebookLaunch | None = None

    @property
    def failed(self) -> List[StepResult]:
        return [step for step in self.steps if not step.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


class Bootstrap:
    """Runs the entrypoint sequence for a :class:`BootstrapConfig`.

    Args:
        config (BootstrapConfig): configuration assembled at container start.
        runner (CommandRunner | None, optional): runner for the external tools. Defaults
            to a runner honouring ``config.settings.strict``.
        environ (MutableMapping[str, str] | None, optional): environment that is updated
            along the way and handed to the server. Defaults to ``os.environ``.

    Note:
        The given environment is modified: ``API_TOKEN`` and the Jupyter path variables
        are removed, ``SHELL``, ``PATH`` and ``DATA`` are set.
    """

    def __init__(
        self,
        config: BootstrapConfig,
        runner: CommandRunner | None = None,
        environ: MutableMapping[str, str] | None = None,
    ) -> None:
        self.config = config
        self.runner = runner or CommandRunner(strict=config.settings.strict)
        self.environ = environ if environ is not None else os.environ
        self.report = BootstrapReport()

    def _record(self, result: StepResult) -> StepResult:
        self.report.steps.append(result)
        return result

    def _record_local(self, name: str, returncode: int = 0) -> StepResult:
        return self.runner.check(self._record(StepResult(name=name, returncode=returncode)))

    def _notebook_launch(self) -> NotebookLaunch:
        settings = self.config.settings
        return NotebookLaunch(
            owner=self.config.identity.owner,
            home_dir=self.config.home_dir,
            config_path=settings.jupyter_config_path,
            token=self.config.jupyter_token,
            pixi_environment=settings.pixi_environment or None,
        )

    def clone(self) -> None:
        if self.config.repository is None:
            return
        self._record(
            clone_repository(
                self.config.repository,
                self.config.settings.workspace_dir,
                self.runner,
                env=self.environ,
            )
        )

    def set_shell(self) -> None:
        self.environ["SHELL"] = self.config.settings.login_shell

    def provision(self) -> NotebookLaunch:
        """Create the group and the user, then prepare the environment and the working
        directory for the server. The secret is removed from the environment right after
        the user is created and, at the latest, when this method exits.
        """
        identity = self.config.identity
        if identity is None:
            raise ValueError("Cannot provision without an identity")
        settings = self.config.settings

        with scrubbed_secret(self.environ, SECRET_VAR) as secret:
            extended = provisioning_environ(self.environ, settings.extra_path)
            self.environ["PATH"] = extended["PATH"]
            self._record(create_group(identity, self.runner, env=self.environ))
            self._record(create_user(identity, self.runner, env=self.environ))
            secret.drop()

            self.environ["DATA"] = str(self.config.data_dir)

            try:
                ensure_prompt_line(settings.bashrc_path)
                self._record_local("prompt")
            except OSError as e:
                cli_logger.error(f"Could not update '{settings.bashrc_path}': {e}")
                self._record_local("prompt", returncode=1)

            self._record(
                chown_workspace(
                    identity.owner, settings.workspace_dir, self.runner, env=self.environ
                )
            )

            home = self.config.home_dir
            try:
                os.chdir(home)
                self._record_local("chdir-home")
            except OSError as e:
                cli_logger.error(f"Could not change directory to '{home}': {e}")
                self._record_local("chdir-home", returncode=1)

            for name in CLEARED_JUPYTER_VARS:
                self.environ.pop(name, None)

        self.report.provisioned = True
        return self._notebook_launch()

    def prepare(self) -> BootstrapReport:
        """Everything before the hand-off. Does not launch anything."""
        self.clone()
        self.set_shell()
        if not self.config.should_provision:
            cli_logger.info(
                "OWNER and CONNECT_GROUP are not both set, nothing to provision and no "
                "server to launch."
            )
            return self.report
        self.report.launch = self.provision()
        return self.report

    def run(self, launch: bool = True) -> BootstrapReport:
        """Run the whole entrypoint. When a server is launched this does not return, the
        process is replaced (or its exit code propagated, see :func:`hand_off`).
        """
        report = self.prepare()
        if not launch or report.launch is None:
            return report

        for step in report.failed:
            cli_logger.warning(f"Launching despite failed step '{step.name}'")
        cli_logger.info(
            f"Starting JupyterLab as '{report.launch.owner}': "
            f"{shlex.join(report.launch.user_command(redact=True))}"
        )
        hand_off(
            report.launch.user_command(),
            NotebookLaunch.environment(self.environ),
            exec_mode=self.config.settings.exec_mode,
        )
        return report

    def plan(self) -> List[str]:
        """Shell-like description of what :meth:`run` would do. No side effects, the
        token is redacted.
        """
        settings = self.config.settings
        lines = []
        if self.config.repository is not None:
            lines.append(
                f"cd {shlex.quote(str(settings.workspace_dir))} && "
                f"{shlex.join(clone_command(self.config.repository))}"
            )
        lines.append(f"export SHELL={shlex.quote(settings.login_shell)}")

        identity = self.config.identity
        if identity is None:
            lines.append("# OWNER and CONNECT_GROUP not both set: no provisioning, no launch")
            return lines

        lines += [
            f"export PATH=$PATH:{settings.extra_path}",
            shlex.join(groupadd_command(identity)),
            shlex.join(useradd_command(identity)),
            f"unset {SECRET_VAR}",
            f"export DATA={shlex.quote(str(self.config.data_dir))}",
            f"# ensure prompt line in {settings.bashrc_path}",
            shlex.join(chown_command(identity.owner, settings.workspace_dir)),
            f"cd {shlex.quote(str(self.config.home_dir))}",
            f"unset {' '.join(CLEARED_JUPYTER_VARS)}",
        ]
        lines.append(f"exec {shlex.join(self._notebook_launch().user_command(redact=True))}")
        return lines
