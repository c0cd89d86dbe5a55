"""
Progress reporter that records what it was asked to show
"""
from contextlib import contextmanager

from core.progress import ProgressReporter


class RecordingProgress(ProgressReporter):
    """Remembers the total and the number of ticks for every task"""

    def __init__(self):
        super().__init__(enabled=False)
        self.tasks = {}

    @contextmanager
    def track(self, name, total):
        task = self.tasks[name] = {"total": total, "ticks": 0}

        def tick(n=1):
            task["ticks"] += n

        yield tick
