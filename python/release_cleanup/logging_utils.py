import logging
import traceback
from typing import Optional

DEFAULT_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
CONSOLE_FORMAT = '%(message)s'


def setup_logging(level: int = logging.INFO, fmt: Optional[str] = None, force: bool = False) -> None:
    """Configure root logging once. Subsequent calls are no-ops unless force is set.

    The interactive CLI logs bare messages so that status lines read naturally
    between prompts; pass fmt=DEFAULT_FORMAT for timestamped output.
    """
    if logging.getLogger().handlers and not force:
        # Already configured; do nothing
        return
    logging.basicConfig(level=level, format=fmt or CONSOLE_FORMAT, force=force)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module/logger by name, after ensuring logging is configured."""
    setup_logging()
    return logging.getLogger(name) if name else logging.getLogger(__name__)


def log_exception(logger: logging.Logger, message: str = "An error occurred", exc_info: Exception = None) -> None:
    """Centralized exception logging with full traceback.

    Args:
        logger: Logger instance to use
        message: Custom error message to log before the traceback
        exc_info: Exception instance (if None, uses current exception context)
    """
    logger.error(message)
    if exc_info is not None:
        logger.error(f"Exception type: {type(exc_info).__name__}")
        logger.error(f"Exception message: {str(exc_info)}")
    logger.debug("Full traceback:")
    logger.debug(traceback.format_exc())
