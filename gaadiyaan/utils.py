# gaadiyaan/utils.py
"""Shared utilities such as logging and retry decorators."""
import logging
import time
from functools import wraps

from .config import settings


def get_logger(name=__name__):
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, settings.log_level, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("gaadiyaan")

def retry(exceptions, tries=3, delay=0, backoff=2, logger=logger, on_retry=None):
    """Call the wrapped function up to `tries` times while it raises `exceptions`.

    `on_retry` is called with the wrapped call's arguments before every new
    attempt, e.g. to roll back a session.
    """
    def deco_retry(f):
        @wraps(f)
        def f_retry(*args, **kwargs):
            mtries, mdelay = tries, delay
            while mtries > 1:
                try:
                    return f(*args, **kwargs)
                except exceptions as e:
                    logger.warning("Retryable error in %s: %s, %d attempt(s) left", f.__name__, e, mtries - 1)
                    if on_retry is not None:
                        on_retry(*args, **kwargs)
                    if mdelay:
                        time.sleep(mdelay)
                    mtries -= 1
                    mdelay *= backoff
            return f(*args, **kwargs)
        return f_retry
    return deco_retry
