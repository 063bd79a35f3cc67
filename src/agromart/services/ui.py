"""Host-side seams the checkout flow talks to: navigation and alerts."""

import logging
from typing import Protocol

from agromart.models import Screen

logger = logging.getLogger(__name__)


class Navigator(Protocol):
    """Moves the host application between screens."""

    def navigate(self, screen: Screen) -> None: ...

    def go_back(self) -> None: ...


class Alerter(Protocol):
    """Shows a short modal message to the user."""

    def alert(self, title: str, message: str) -> None: ...


class LoggingAlerter:
    """Alerter for headless hosts; writes alerts to the log."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def alert(self, title: str, message: str) -> None:
        self._log.warning("%s: %s", title, message)
