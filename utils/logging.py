"""
Logging utilities for the team analytics service
"""
import logging
import sys

# Configure basic logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)


def _format(message: str, context: dict) -> str:
    extra_info = " ".join(f"{k}={v}" for k, v in context.items())
    return f"{message} {extra_info}".strip()


class EnhancedLogger:
    """Logger that renders keyword arguments as key=value context"""

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def debug(self, message: str, **kwargs):
        self._logger.debug(_format(message, kwargs))

    def info(self, message: str, **kwargs):
        self._logger.info(_format(message, kwargs))

    def warning(self, message: str, **kwargs):
        self._logger.warning(_format(message, kwargs))

    def error(self, message: str, **kwargs):
        self._logger.error(_format(message, kwargs))

    def exception(self, message: str, **kwargs):
        self._logger.exception(_format(message, kwargs))


def get_logger(name: str) -> EnhancedLogger:
    """Get a logger instance"""
    return EnhancedLogger(logging.getLogger(name))


def log_upstream_call(source: str, endpoint: str, count: int, **kwargs):
    """Log a successful upstream fetch"""
    logger = get_logger("upstream")
    logger.info(f"Fetched {count} items from {source} {endpoint}", **kwargs)
