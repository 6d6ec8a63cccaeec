"""Process-wide logging for the relay.

Every relay module logs under the ``ghrelay`` hierarchy. HTTP client
libraries are held at INFO or above, so DEBUG output shows admission
decisions and API calls rather than connection pool chatter. An unknown
level name falls back to INFO and is reported once logging is up.
"""

import logging

from ghrelay.config import LoggingConfig

RELAY_LOGGER = "ghrelay"
LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Log every request/connection at DEBUG
HTTP_CLIENT_LOGGERS = ("urllib3", "requests")


def _resolve_level(level: str) -> int | None:
    return LEVELS.get(level.upper().strip())


class RelayLogging:
    """Applies the ``logging`` config section at process start."""

    def __init__(self, config: LoggingConfig) -> None:
        self._requested = config.level
        resolved = _resolve_level(config.level)
        self._known = resolved is not None
        self._level = logging.INFO if resolved is None else resolved
        self._format = config.format or DEFAULT_FORMAT

    @property
    def level(self) -> int:
        return self._level

    def setup(self) -> logging.Logger:
        """Install the root handler and return the ``ghrelay`` logger."""
        logging.basicConfig(level=self._level, format=self._format, force=True)
        relay = logging.getLogger(RELAY_LOGGER)
        relay.setLevel(self._level)
        for name in HTTP_CLIENT_LOGGERS:
            logging.getLogger(name).setLevel(max(self._level, logging.INFO))
        if not self._known:
            relay.warning("Unknown log level %r, using INFO", self._requested)
        return relay
