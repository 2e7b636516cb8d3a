import subprocess
from pathlib import Path
from typing import Dict

import pytest
from omegaconf import OmegaConf

from privatelab.config import LabSettings

OWNER = "alice"


@pytest.fixture
def lab_settings(tmp_path: Path) -> LabSettings:
    """Image settings pointing to a throw-away filesystem layout, with the owner's home
    already in place.
    """
    settings = LabSettings(
        workspace_dir=tmp_path / "workspace",
        data_root=tmp_path / "data",
        home_root=tmp_path / "home",
        bashrc_path=tmp_path / "etc" / "bash.bashrc",
        jupyter_config_path=tmp_path / "etc" / "jupyter_notebook_config.py",
    )
    settings.workspace_dir.mkdir()
    (settings.home_root / OWNER).mkdir(parents=True)
    return settings


@pytest.fixture
def settings_file(tmp_path: Path, lab_settings: LabSettings) -> Path:
    path = tmp_path / "privatelab.yaml"
    OmegaConf.save(OmegaConf.create(lab_settings.model_dump(mode="json")), path)
    return path


@pytest.fixture
def owner_environ() -> Dict[str, str]:
    return {
        "OWNER": OWNER,
        "CONNECT_GROUP": "physics",
        "CONNECT_GID": "5000",
        "OWNER_UID": "1234",
        "API_TOKEN": "api-secret",
        "JUPYTER_TOKEN": "jupyter-secret",
        "JUPYTER_PATH": "/opt/jupyter",
        "JUPYTER_CONFIG_DIR": "/opt/jupyter/etc",
        "PATH": "/usr/local/bin:/usr/bin:/bin",
    }


@pytest.fixture
def completed():
    """Factory of finished processes, to be used as return value of a patched
    ``subprocess.run``.
    """

    def _completed(returncode: int = 0) -> subprocess.CompletedProcess:
        return subprocess.CompletedProcess(args=[], returncode=returncode)

    return _completed
