"""Configuration of the container entrypoint.

Everything the entrypoint needs is collected once, before any step runs, into a
:class:`BootstrapConfig`. Fixed paths and launcher options live in :class:`LabSettings`,
which has defaults matching the image layout and can be overridden from a YAML file
(local path or URL).
"""

import io
import logging
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, cast

import requests
from omegaconf import OmegaConf
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError
from requests.exceptions import RequestException
from validators import url

from privatelab.constants import (
    BASHRC_PATH,
    DATA_ROOT,
    DEFAULT_JUPYTER_PORT,
    DEFAULT_PIXI_ENVIRONMENT,
    GID_VAR,
    GROUP_VAR,
    HOME_ROOT,
    JUPYTER_CONFIG_PATH,
    JUPYTER_TOKEN_VAR,
    LOGIN_SHELL,
    OWNER_VAR,
    SBIN_DIR,
    UID_VAR,
    WORKSPACE_DIR,
)
from privatelab.exceptions import ConfigurationError

py_logger = logging.getLogger(__name__)


class LabSettings(BaseModel):
    """Image-level settings. The defaults reproduce the layout of the published images,
    so a settings file is only needed to deviate from them.
    """

    model_config = ConfigDict(extra="forbid")

    workspace_dir: Path = WORKSPACE_DIR
    data_root: Path = DATA_ROOT
    home_root: Path = HOME_ROOT
    bashrc_path: Path = BASHRC_PATH
    jupyter_config_path: Path = JUPYTER_CONFIG_PATH

    login_shell: str = LOGIN_SHELL
    # Appended to PATH while provisioning, groupadd/useradd live there
    extra_path: str = SBIN_DIR

    # Run the server through `pixi run -e <env>`. Empty means call `jupyter` directly.
    pixi_environment: str | None = DEFAULT_PIXI_ENVIRONMENT
    jupyter_ip: str = "0.0.0.0"
    jupyter_port: int = Field(default=DEFAULT_JUPYTER_PORT, ge=1, le=65535)

    strict: bool = False
    exec_mode: Literal["exec", "spawn"] = "exec"


class Identity(BaseModel):
    """The external identity the container is provisioned for."""

    owner: str = Field(min_length=1)
    group: str = Field(min_length=1)
    gid: int | None = Field(default=None, ge=0)
    uid: int | None = Field(default=None, ge=0)


class BootstrapConfig(BaseModel):
    """Explicit configuration of a single container start."""

    repository: str | None = None
    identity: Identity | None = None
    jupyter_token: SecretStr = SecretStr("")
    settings: LabSettings = Field(default_factory=LabSettings)

    @property
    def should_provision(self) -> bool:
        return self.identity is not None

    @property
    def home_dir(self) -> Path:
        if self.identity is None:
            raise ConfigurationError("No owner is configured, there is no home directory")
        return self.settings.home_root / self.identity.owner

    @property
    def data_dir(self) -> Path:
        if self.identity is None:
            raise ConfigurationError("No owner is configured, there is no data directory")
        return self.settings.data_root / self.identity.owner

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str],
        repository: str | None = None,
        settings: LabSettings | None = None,
    ) -> "BootstrapConfig":
        """Assemble the configuration from a process environment.

        Provisioning is only configured when both ``OWNER`` and ``CONNECT_GROUP`` are
        set. ``CONNECT_GID`` and ``OWNER_UID`` are optional, but must be integers when
        given.

        Args:
            environ (Mapping[str, str]): process environment, usually ``os.environ``.
            repository (str | None, optional): repository to clone into the workspace.
                Empty strings are treated as missing. Defaults to None.
            settings (LabSettings | None, optional): image settings. Defaults to None,
                meaning the image defaults.

        Raises:
            ConfigurationError: when the numeric ids are malformed.

        Returns:
            BootstrapConfig: the validated configuration.
        """
        owner = environ.get(OWNER_VAR, "").strip()
        group = environ.get(GROUP_VAR, "").strip()

        identity = None
        if owner and group:
            try:
                identity = Identity(
                    owner=owner,
                    group=group,
                    gid=_parse_numeric_id(environ, GID_VAR),
                    uid=_parse_numeric_id(environ, UID_VAR),
                )
            except ValidationError as exc:
                raise ConfigurationError(f"Invalid identity in environment: {exc}") from exc
        elif owner or group:
            py_logger.debug(
                f"Only one of {OWNER_VAR} and {GROUP_VAR} is set, skipping provisioning"
            )

        return cls(
            repository=(repository or "").strip() or None,
            identity=identity,
            jupyter_token=SecretStr(environ.get(JUPYTER_TOKEN_VAR, "")),
            settings=settings if settings is not None else LabSettings(),
        )


def _parse_numeric_id(environ: Mapping[str, str], name: str) -> int | None:
    raw = environ.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'")


def retrieve_remote_settings(source: str) -> Dict[str, Any]:
    """Fetches and parses a remote YAML settings file.

    Args:
       source: URL to the raw settings file, e.g. raw GitHub link.

    Raises:
       ConfigurationError: if the request or the parsing fails.
    """
    try:
        response = requests.get(source, timeout=10)
        response.raise_for_status()
    except RequestException as exception:
        raise ConfigurationError(
            f"Failed to fetch settings from '{source}' - {str(exception)}"
        ) from exception

    try:
        cfg = OmegaConf.load(io.StringIO(response.text))
    except Exception as exception:
        raise ConfigurationError(
            f"Failed to load settings from '{source}'. Did you remember to pass a raw file?"
            f"\nException: '{str(exception)}'"
        ) from exception
    return _to_dict(cfg, source)


def load_settings(source: str | Path | None = None) -> LabSettings:
    """Load image settings from a YAML file or URL, falling back to the defaults.

    Args:
        source (str | Path | None, optional): path or URL of a YAML file. Defaults to
            None, meaning the image defaults.

    Raises:
        ConfigurationError: if the file cannot be read or does not validate.

    Returns:
        LabSettings: validated settings.
    """
    if source is None:
        return LabSettings()

    if isinstance(source, str) and url(source):
        py_logger.info(f"Retrieving settings from URL '{source}'")
        raw_settings = retrieve_remote_settings(source)
    else:
        path = Path(source)
        if not path.is_file():
            raise ConfigurationError(f"Settings file '{path.resolve()}' does not exist")
        try:
            raw_settings = _to_dict(OmegaConf.load(path), str(path))
        except ConfigurationError:
            raise
        except Exception as exception:
            raise ConfigurationError(
                f"Failed to parse settings file '{path}': {exception}"
            ) from exception

    try:
        return LabSettings.model_validate(raw_settings)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings in '{source}': {exc}") from exc


def _to_dict(cfg: Any, source: str) -> Dict[str, Any]:
    settings_dict = cast(Dict[str, Any], OmegaConf.to_object(cfg))
    # An empty YAML file loads as a None config
    if settings_dict is None:
        return {}
    if not isinstance(settings_dict, dict):
        raise ConfigurationError(f"Settings in '{source}' must be a mapping")
    return settings_dict
