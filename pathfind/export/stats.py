"""
Statistics reports for lanes, as CSV.
"""

import csv
import io
from pathlib import Path
from typing import List, Sequence

from core.exceptions import FilesystemError, StatsMismatchError
from core.progress import NO_PROGRESS, ProgressReporter
from pathfind.lanes.lane import Lane


def collect_stats(lanes: Sequence[Lane], progress: ProgressReporter = NO_PROGRESS) -> List[List[str]]:
    """
    Build the rows of a stats report: the header from the first lane,
    then one row per lane.

    Raises:
        ValueError: if there are no lanes to take a header from
        StatsMismatchError: if a row has a different number of columns
            from the header
    """
    if not lanes:
        raise ValueError("no lanes to collect stats for")

    header = lanes[0].stats_headers()
    rows = [header]
    with progress.track("collecting stats", len(lanes)) as tick:
        for lane in lanes:
            row = lane.stats()
            if len(row) != len(header):
                raise StatsMismatchError(
                    f"ERROR: stats for lane '{lane.name}' have {len(row)} columns "
                    f"but the header has {len(header)}"
                )
            rows.append(row)
            tick(1)
    return rows


def stats_to_csv(rows: Sequence[Sequence[str]], separator: str = ",") -> bytes:
    """Format stats rows as CSV, one line per row"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=separator, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def write_stats_csv(rows: Sequence[Sequence[str]], path: Path, separator: str = ","):
    """
    Write stats rows to a CSV file.

    Raises:
        FilesystemError: if the file can't be written
    """
    path = Path(path)
    data = stats_to_csv(rows, separator)
    try:
        path.write_bytes(data)
    except OSError as e:
        if path.is_file():
            path.unlink()
        raise FilesystemError("couldn't write stats file", path, e) from e
