import pytest
import typer

from privatelab.config import LabSettings
from privatelab.jupyter_config import render_jupyter_config, write_jupyter_config


def test_render_jupyter_config():
    rendered = render_jupyter_config(LabSettings(jupyter_port=9999))
    assert 'c.ServerApp.ip = "0.0.0.0"' in rendered
    assert "c.ServerApp.port = 9999" in rendered
    assert "c.ServerApp.open_browser = False" in rendered
    assert 'c.ServerApp.terminado_settings = {"shell_command": ["/bin/bash"]}' in rendered
    assert "c.ServerApp.token" not in rendered
    assert "c.NotebookApp.token" not in rendered


def test_write_jupyter_config(lab_settings):
    path = write_jupyter_config(lab_settings)
    assert path == lab_settings.jupyter_config_path
    assert path.read_text() == render_jupyter_config(lab_settings)


def test_write_jupyter_config_twice(lab_settings):
    write_jupyter_config(lab_settings)
    with pytest.raises(typer.Exit):
        write_jupyter_config(lab_settings)
    write_jupyter_config(lab_settings, overwrite=True)
