import logging
import sys

LOG_FILE = "/var/log/panel_wizard.log"
FALLBACK_LOG_FILE = "/tmp/panel_wizard.log"

_FORMAT = logging.Formatter(
    "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)


def _file_handler(path: str) -> logging.FileHandler:
    # Unwritable paths (e.g. /var/log as a normal user) land in /tmp instead
    try:
        fh = logging.FileHandler(path)
    except OSError:
        fh = logging.FileHandler(FALLBACK_LOG_FILE)
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(_FORMAT)
    return fh


def setup_logger() -> logging.Logger:
    logger = logging.getLogger("panel_wizard")
    logger.setLevel(logging.DEBUG)

    if not logger.handlers:
        logger.addHandler(_file_handler(LOG_FILE))

        # Textual draws on the terminal, so only errors go to stderr
        sh = logging.StreamHandler(sys.stderr)
        sh.setLevel(logging.ERROR)
        sh.setFormatter(_FORMAT)
        logger.addHandler(sh)
    return logger


def use_log_file(path: str) -> str:
    """Swap the file handler over to ``path``. Returns the file actually written."""
    for handler in list(log.handlers):
        if isinstance(handler, logging.FileHandler):
            log.removeHandler(handler)
            handler.close()
    fh = _file_handler(path)
    log.addHandler(fh)
    log.debug("Logging to %s", fh.baseFilename)
    return fh.baseFilename


log = setup_logger()
