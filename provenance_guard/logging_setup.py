import logging
from logging.handlers import TimedRotatingFileHandler
import os

from provenance_guard.config import get_settings

LOG_FILE_NAME = 'provenance_guard.log'
LOG_FORMAT = '[%(asctime)s] %(levelname)s %(name)s: %(message)s'

_decision_log_handler = None


def _build_decision_log_handler(log_dir):
    os.makedirs(log_dir, exist_ok=True)
    # One file per day, two weeks of decisions kept for review
    handler = TimedRotatingFileHandler(
        os.path.join(log_dir, LOG_FILE_NAME), when="midnight", interval=1, backupCount=14
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def setup_logging(log_dir=None, level=None):
    """Route policy decisions and advisories to the console and a rotating file."""
    global _decision_log_handler
    cfg = get_settings()
    log_dir = os.path.abspath(log_dir or cfg.PROVENANCE_LOG_DIR)

    close_logging()
    _decision_log_handler = _build_decision_log_handler(log_dir)
    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel((level or cfg.PROVENANCE_LOG_LEVEL).upper())
    root_logger.handlers = [_decision_log_handler, console]

    log_file = _decision_log_handler.baseFilename
    logging.getLogger(__name__).info("provenance policy logging to %s", log_file)
    return log_file


def close_logging():
    global _decision_log_handler
    if _decision_log_handler:
        _decision_log_handler.close()
        _decision_log_handler = None
