# Command-line interface of the privatelab container entrypoint.
# Example:
#
# >>> privatelab start https://github.com/org/repo.git
#
# --------------------------------------------------------------------------------------
#
# NOTE: import modules in the command's function, not here, as having them here will
# slow down the CLI commands.

import importlib.metadata as im
import logging
import os
from pathlib import Path

import typer
from typing_extensions import Annotated

app = typer.Typer(pretty_exceptions_enable=False)

py_logger = logging.getLogger(__name__)
cli_logger = logging.getLogger("cli_logger")


def _version_callback(value: bool):
    if not value:
        return
    try:
        ver = im.version("privatelab")
    except im.PackageNotFoundError:
        ver = "0+unknown"
    typer.echo(f"privatelab {ver}")
    raise typer.Exit()


@app.callback(invoke_without_command=True)
def _root(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
        expose_value=False,
    ),
):
    """privatelab container entrypoint."""
    return


ConfigOption = Annotated[
    str | None,
    typer.Option(
        "-c",
        "--config",
        help="Path or URL to a YAML file overriding the image settings.",
    ),
]
RepositoryArgument = Annotated[
    str | None,
    typer.Argument(help="Git repository to clone into the workspace directory."),
]


def _load_bootstrap_config(
    repository: str | None, config: str | None, strict: bool | None = None
):
    """Assemble the configuration once, from the settings file and the environment.

    Raises:
        typer.Exit: if the settings or the environment are invalid.
    """
    from privatelab.config import BootstrapConfig, load_settings
    from privatelab.exceptions import ConfigurationError

    try:
        settings = load_settings(config)
        if strict is not None:
            settings = settings.model_copy(update={"strict": strict})
        return BootstrapConfig.from_environ(os.environ, repository=repository, settings=settings)
    except ConfigurationError as exc:
        cli_logger.error(str(exc))
        raise typer.Exit(1)


@app.command()
def start(
    repository: RepositoryArgument = None,
    config: ConfigOption = None,
    strict: Annotated[
        bool | None,
        typer.Option(
            "--strict/--no-strict",
            help="Stop at the first failed step, exiting with its exit code.",
        ),
    ] = None,
    launch: Annotated[
        bool,
        typer.Option(
            "--launch/--no-launch",
            help="Whether to start JupyterLab after provisioning.",
        ),
    ] = True,
):
    """Provision the container user and start JupyterLab as that user."""
    from privatelab.bootstrap import Bootstrap
    from privatelab.exceptions import StepFailedError

    bootstrap_config = _load_bootstrap_config(repository, config, strict)
    try:
        report = Bootstrap(bootstrap_config).run(launch=launch)
    except StepFailedError as exc:
        cli_logger.error(f"Aborting: {exc}")
        raise typer.Exit(exc.result.returncode or 1)

    # Only reached without a server to hand off to
    if not launch and not report.ok:
        failed = ", ".join(step.name for step in report.failed)
        cli_logger.warning(f"Finished with failed steps: {failed}")
        raise typer.Exit(1)


@app.command()
def plan(repository: RepositoryArgument = None, config: ConfigOption = None):
    """Show what 'start' would do, without doing it. The token is redacted."""
    from privatelab.bootstrap import Bootstrap

    bootstrap_config = _load_bootstrap_config(repository, config)
    for line in Bootstrap(bootstrap_config, environ={}).plan():
        cli_logger.info(line)


@app.command()
def write_jupyter_config(
    output: Annotated[
        str | None,
        typer.Option(
            "-o",
            "--output",
            help="Where to write the file. Defaults to the path JupyterLab is started with.",
        ),
    ] = None,
    config: ConfigOption = None,
    overwrite: Annotated[
        bool, typer.Option(help="Whether to replace an existing file.")
    ] = False,
):
    """Write the Jupyter server configuration file used by 'start'."""
    from privatelab.config import load_settings
    from privatelab.exceptions import ConfigurationError
    from privatelab.jupyter_config import write_jupyter_config as _write

    try:
        settings = load_settings(config)
    except ConfigurationError as exc:
        cli_logger.error(str(exc))
        raise typer.Exit(1)
    _write(settings, Path(output) if output else None, overwrite=overwrite)


if __name__ == "__main__":
    app()
