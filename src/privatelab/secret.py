"""Removal of secrets from the process environment before user code can inherit them."""

import logging
from contextlib import contextmanager
from typing import Iterator, MutableMapping

py_logger = logging.getLogger(__name__)


class SecretHandle:
    """Handle on a secret stored in an environment mapping. Dropping it removes the
    variable; dropping twice is a no-op.
    """

    def __init__(self, environ: MutableMapping[str, str], name: str) -> None:
        self._environ = environ
        self.name = name
        self.dropped = False

    @property
    def present(self) -> bool:
        return self.name in self._environ

    def drop(self) -> None:
        if self.dropped:
            return
        if self._environ.pop(self.name, None) is not None:
            py_logger.debug(f"Removed '{self.name}' from the environment")
        self.dropped = True


@contextmanager
def scrubbed_secret(environ: MutableMapping[str, str], name: str) -> Iterator[SecretHandle]:
    """Yield a :class:`SecretHandle` for ``name`` and drop it on exit, also when the body
    raises.

    Example:

    >>> with scrubbed_secret(os.environ, "API_TOKEN") as secret:
    >>>     create_user(...)
    >>>     secret.drop()
    """
    handle = SecretHandle(environ, name)
    try:
        yield handle
    finally:
        handle.drop()
