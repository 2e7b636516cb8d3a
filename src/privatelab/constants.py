"""constants used by the privatelab container entrypoint"""

from pathlib import Path

# Filesystem layout of the image
WORKSPACE_DIR = Path("/workspace")
DATA_ROOT = Path("/data")
HOME_ROOT = Path("/home")
BASHRC_PATH = Path("/etc/bash.bashrc")
JUPYTER_CONFIG_PATH = Path("/usr/local/etc/jupyter_notebook_config.py")

LOGIN_SHELL = "/bin/bash"
SBIN_DIR = "/usr/sbin"

# Same prompt as on the login nodes
PS1_LINE = r'export PS1="[\A] \H:\w $ "'

# Environment variables read at container start
OWNER_VAR = "OWNER"
GROUP_VAR = "CONNECT_GROUP"
GID_VAR = "CONNECT_GID"
UID_VAR = "OWNER_UID"
SECRET_VAR = "API_TOKEN"
JUPYTER_TOKEN_VAR = "JUPYTER_TOKEN"

# Cleared before launching so the provisioning context does not leak into the session
CLEARED_JUPYTER_VARS = ("JUPYTER_PATH", "JUPYTER_CONFIG_DIR")

DEFAULT_PIXI_ENVIRONMENT = "ml"
DEFAULT_JUPYTER_PORT = 8888

REDACTED = "********"

# Return codes for tools that cannot be started, as a shell would report them
COMMAND_NOT_EXECUTABLE = 126
COMMAND_NOT_FOUND = 127
