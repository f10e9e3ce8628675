"""
Phase timing for build and solve steps
"""
import logging
import time
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)


class PhaseTimer:
    """Elapsed wall-clock time of one phase, filled in when the phase ends"""

    def __init__(self, name: str):
        self.name = name
        self.start = time.perf_counter()
        self.elapsed = 0.0

    def stop(self) -> float:
        self.elapsed = time.perf_counter() - self.start
        return self.elapsed


@contextmanager
def phase_timer(name: str, enabled: bool = False) -> Iterator[PhaseTimer]:
    """
    Time a block and log its duration when ``enabled``.

    The duration is logged even if the block raises.

    Examples
    --------
    >>> with phase_timer("CSR_MATRIX_PARSE", enabled=True):
    ...     build_matrix(doc)
    """
    timer = PhaseTimer(name)
    if enabled:
        logger.info("[TIMESTAMP] %s_START", name)
    try:
        yield timer
    finally:
        timer.stop()
        if enabled:
            logger.info("[TIMESTAMP] %s_END", name)
            logger.info("[DURATION] %s: %.6f seconds", name, timer.elapsed)
