# timing decorator
import time
from functools import wraps

from .logging_config import get_logger

logger = get_logger(__name__)


def timing(func):
    """Log the wall-clock time of each call and keep the last one on ``wrapper.elapsed_ms``."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed_time = time.perf_counter() - start_time
        wrapper.elapsed_ms = 1000 * elapsed_time
        logger.info("timed call", function=func.__name__, elapsed_ms=round(wrapper.elapsed_ms, 2))
        return result

    wrapper.elapsed_ms = None
    return wrapper
