"""Timing context helper for performance logging."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Iterator, Optional


@contextmanager
def log_timing(label: str, logger: Optional[logging.Logger] = None) -> Iterator[None]:
    """Measures elapsed time for a block and logs it in milliseconds.

    Blocks that exit with an exception are logged as failed, and the exception
    is re-raised untouched.
    """
    log = logger or logging.getLogger(__name__)
    start = time.perf_counter()
    failed = False
    try:
        yield
    except BaseException:
        failed = True
        raise
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        if failed:
            log.info("[Timing] %s failed after %.1f ms", label, elapsed_ms)
        else:
            log.info("[Timing] %s: %.1f ms", label, elapsed_ms)
