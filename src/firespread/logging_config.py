"""Simple console logging configuration used by the CLI and library."""

import logging
import sys

_installed: list[logging.Handler] = []


# logging configuration
class InfoFilter(logging.Filter):
    """Filter that lets INFO/DEBUG go to stdout handler."""

    def filter(self, rec):
        return rec.levelno in (logging.DEBUG, logging.INFO)


def configure_logger(level: int = logging.INFO) -> None:
    """Configure root logger with split stdout/stderr handlers.

    Calling it again replaces the handlers installed by a previous call.
    """
    logger = logging.getLogger()
    for handler in _installed:
        logger.removeHandler(handler)
    _installed.clear()

    logger.setLevel(level)
    fmt = logging.Formatter("%(levelname)s %(name)s: %(message)s")
    h1 = logging.StreamHandler(sys.stdout)
    h1.setLevel(level)
    h1.addFilter(InfoFilter())
    h1.setFormatter(fmt)
    h2 = logging.StreamHandler()
    h2.setLevel(logging.WARNING)
    h2.setFormatter(fmt)
    logger.addHandler(h1)
    logger.addHandler(h2)
    _installed.extend((h1, h2))
