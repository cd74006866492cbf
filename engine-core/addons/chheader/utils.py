import logging
import sys


class ChHeaderLogger:
    """Unified logger for the addon and standalone runs.

    mitmproxy forwards stdlib logging records into its event log, so the
    same calls show up in mitmdump output and in plain Python processes.
    """
    def __init__(self, name: str = "chheader"):
        self.name = name
        self._logger = logging.getLogger(name)

    def info(self, msg: str):
        self._logger.info(f"ChHeader: {msg}")

    def warn(self, msg: str):
        self._logger.warning(f"ChHeader: {msg}")

    def warning(self, msg: str):
        self.warn(msg)

    def error(self, msg: str):
        self._logger.error(f"ChHeader: {msg}")

    def debug(self, msg: str):
        self._logger.debug(f"ChHeader: {msg}")

_LOG_INITIALIZED = False

def setup_logging() -> ChHeaderLogger:
    global _LOG_INITIALIZED

    # Configure root logger for standalone runs
    root = logging.getLogger()
    if root.level == logging.NOTSET:
        root.setLevel(logging.INFO)

    # Add stdout handler in standalone mode
    if not root.handlers and not any(arg.startswith("mitm") for arg in sys.argv):
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s', datefmt='%H:%M:%S')
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # Reduce noise from mitmproxy's own logging
    logging.getLogger("mitmproxy").setLevel(logging.WARNING)

    logger = ChHeaderLogger("chheader")
    if not _LOG_INITIALIZED:
        logger.debug("system logger initialized")
        _LOG_INITIALIZED = True
    return logger
