"""Rendering of the Jupyter configuration file baked into the image. The token is never
written here, it is passed on the command line when the server starts.
"""

import json
import logging
from pathlib import Path

import typer

from privatelab.config import LabSettings

cli_logger = logging.getLogger("cli_logger")

JUPYTER_CONFIG_TEMPLATE = r"""# Configuration file for JupyterLab, generated by privatelab.
# The authentication token is supplied at container start.
c = get_config()  # noqa: F821

c.ServerApp.ip = {ip}
c.ServerApp.port = {port}
c.ServerApp.open_browser = False
c.ServerApp.allow_root = False
c.ServerApp.allow_remote_access = True
c.ServerApp.terminado_settings = {{"shell_command": [{login_shell}]}}
"""


def render_jupyter_config(settings: LabSettings) -> str:
    return JUPYTER_CONFIG_TEMPLATE.format(
        ip=json.dumps(settings.jupyter_ip),
        port=settings.jupyter_port,
        login_shell=json.dumps(settings.login_shell),
    )


def write_jupyter_config(
    settings: LabSettings, file_path: Path | None = None, overwrite: bool = False
) -> Path:
    """Writes the rendered configuration, by default to the path the server reads.

    Raises:
        typer.Exit: if the file exists and ``overwrite`` is not set.
    """
    file_path = file_path or settings.jupyter_config_path
    if not file_path.parent.exists():
        cli_logger.info(f"Creating directory '{file_path.parent.resolve()}'!")
        file_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(file_path, "w" if overwrite else "x", encoding="utf-8") as f:
            f.write(render_jupyter_config(settings))
    except FileExistsError:
        cli_logger.error(
            f"File '{file_path.resolve()}' already exists! Pass --overwrite or delete the "
            "file first."
        )
        raise typer.Exit(1)
    cli_logger.info(f"Saved Jupyter configuration to '{file_path.resolve()}'.")
    return file_path
