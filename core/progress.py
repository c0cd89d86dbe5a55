"""
Progress reporting for slow operations.

Progress is advisory only. Every component takes a ProgressReporter and
asks it for an update callback per task; a disabled reporter hands out a
callback that does nothing.
"""

import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TextIO

from tqdm import tqdm

ProgressCallback = Callable[[int], object]


def _noop(n: int = 1):
    return None


class ProgressReporter:
    """Hands out progress bars for named units of work"""

    def __init__(self, enabled: bool = True, stream: TextIO | None = None):
        self.enabled = enabled
        self.stream = stream

    @contextmanager
    def track(self, name: str, total: int) -> Iterator[ProgressCallback]:
        """
        Yield a callback to be called after each completed unit of work.

        Args:
            name: Label shown next to the bar
            total: Number of units expected
        """
        if not self.enabled:
            yield _noop
            return

        with tqdm(
            total=total,
            desc=name,
            leave=False,
            file=self.stream or sys.stderr,
        ) as bar:
            yield bar.update


NO_PROGRESS = ProgressReporter(enabled=False)
