import logging
from pathlib import Path

from privatelab.constants import PS1_LINE

py_logger = logging.getLogger(__name__)


def ensure_prompt_line(bashrc: Path, line: str = PS1_LINE) -> bool:
    """Append ``line`` to the system-wide bash init file unless it is already there.

    Returns:
        bool: True if the file was modified.
    """
    existing = bashrc.read_text(encoding="utf-8") if bashrc.exists() else ""
    if line in existing.splitlines():
        py_logger.debug(f"Prompt already customized in '{bashrc}'")
        return False

    bashrc.parent.mkdir(parents=True, exist_ok=True)
    with open(bashrc, "a", encoding="utf-8") as f:
        if existing and not existing.endswith("\n"):
            f.write("\n")
        f.write(line + "\n")
    return True
