"""
In-process navigation history for the dashboard shell.

    navigate(path)                push a new entry
    navigate(path, replace=True)  overwrite the current entry
    redirect(path)                drop the whole history (full page load)
    back()                        step back one entry, if any
"""

import logging

from sf_dashboard.roles import LOGIN_ROUTE

logger = logging.getLogger("navigation")
logger.setLevel(logging.INFO)


class Router:
    def __init__(self, initial: str = LOGIN_ROUTE):
        self._history = [initial]
        self.intended: str | None = None

    @property
    def current(self) -> str:
        return self._history[-1]

    @property
    def history(self) -> tuple[str, ...]:
        return tuple(self._history)

    def navigate(self, path: str, replace: bool = False) -> None:
        if replace:
            self._history[-1] = path
        else:
            self._history.append(path)
        logger.info("Navigate → %s%s", path, " (replace)" if replace else "")

    def redirect(self, path: str) -> None:
        self._history = [path]
        logger.info("Redirect → %s", path)

    def back(self) -> str:
        if len(self._history) > 1:
            self._history.pop()
        return self.current


def guard(store, router: Router, path: str) -> bool:
    """Allow `path` only with a stored token; otherwise send the user to login.

    The blocked path is remembered on `router.intended`.
    """
    if store.token():
        return True
    router.intended = path
    router.navigate(LOGIN_ROUTE, replace=True)
    return False
