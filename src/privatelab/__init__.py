import logging
import os
import sys

logger = logging.getLogger(__name__)

log_level = os.getenv("PRIVATELAB_LOG_LEVEL", "INFO")

valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
if log_level.upper() not in valid_levels:
    logger.warning(
        f"PRIVATELAB_LOG_LEVEL was set to '{log_level}', which is not recognized. "
        f"Supported types are {', '.join(sorted(valid_levels))}."
    )
    log_level = "INFO"

logger.setLevel(getattr(logging, log_level.upper()))

if not logger.hasHandlers():
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter("[%(levelname)s] %(name)s:%(lineno)d - %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)

logger.propagate = False


class CLIFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()
        if record.levelno >= logging.ERROR:
            return f"[ERROR]: {msg}"
        if record.levelno == logging.WARNING:
            return f"[WARNING]: {msg}"
        return msg


plain_logger = logging.getLogger("cli_logger")
plain_logger.setLevel(logging.INFO)
if not plain_logger.hasHandlers():
    # The entrypoint runs as PID 1, so keep everything on stdout for `docker logs`
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(CLIFormatter())
    plain_logger.addHandler(h)
plain_logger.propagate = False
