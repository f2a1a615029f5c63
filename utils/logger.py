import logging
import sys

LOGGER_NAME = "spotify_album_purge"

LOG_FORMAT = "%(asctime)s %(levelname)s <%(module)s:%(lineno)d> %(message)s"
# Kitchen clock, e.g. 3:04PM
TIME_FORMAT = "%I:%M%p"

_logger = logging.getLogger(LOGGER_NAME)


def setup_logging(level: int = logging.INFO, *, stream=None) -> logging.Logger:
    """Configure stderr logging for the CLI and the spotify_api package.

    Safe to call more than once; handlers installed by a previous call are replaced.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=TIME_FORMAT))

    # httpx logs every request at INFO; only show it when debugging.
    httpx_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING

    for name, name_level in ((LOGGER_NAME, level), ("spotify_api", level), ("httpx", httpx_level)):
        target = logging.getLogger(name)
        for old in list(target.handlers):
            target.removeHandler(old)
        target.addHandler(handler)
        target.setLevel(name_level)
        target.propagate = False
    return _logger


def log_debug(message: str) -> None:
    _logger.debug(message, stacklevel=2)


def log_info(message: str) -> None:
    _logger.info(message, stacklevel=2)


def log_success(message: str) -> None:
    _logger.info(f"✅ {message}", stacklevel=2)


def log_warning(message: str) -> None:
    _logger.warning(message, stacklevel=2)


def log_error(message: str) -> None:
    _logger.error(message, stacklevel=2)
