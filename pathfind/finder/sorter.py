"""
Sort lanes into a stable, natural order.
"""

import re
from typing import Iterable, List, Tuple

from pathfind.lanes.lane import Lane

_SPLIT = re.compile(r"[_#]")


def name_key(name: str) -> Tuple[Tuple[int, int, str], ...]:
    """
    Natural sort key for a lane name. "10_1#2" becomes the parts 10, 1 and
    2, compared as numbers, so it sorts after "9_1#2". Numeric parts sort
    before text parts so that keys are always comparable.
    """
    key = []
    for part in _SPLIT.split(name):
        if part.isdecimal():
            key.append((0, int(part), part))
        else:
            key.append((1, 0, part))
    return tuple(key)


class Sorter:
    """Orders lanes by name, then by the database they came from"""

    def sort_key(self, lane: Lane):
        return (name_key(lane.name), lane.name, lane.database.name)

    def sort_lanes(self, lanes: Iterable[Lane]) -> List[Lane]:
        """
        Return a new, sorted list. Lanes with identical keys keep their
        original relative order.
        """
        return sorted(lanes, key=self.sort_key)
