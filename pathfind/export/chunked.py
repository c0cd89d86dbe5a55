"""
Compress and write large byte strings in chunks, so that progress can be
shown while it happens. The number of chunks only affects how often the
progress bar moves; the last chunk picks up whatever is left over.
"""

import gzip
import io
import logging
from pathlib import Path
from typing import Iterator, Tuple

from core.exceptions import FilesystemError
from core.progress import NO_PROGRESS, ProgressReporter

logger = logging.getLogger(__name__)

DEFAULT_NUM_CHUNKS = 100


def chunk_bounds(length: int, num_chunks: int = DEFAULT_NUM_CHUNKS) -> Iterator[Tuple[int, int]]:
    """
    Yield (start, end) offsets that split length bytes into num_chunks
    pieces. Pieces may be empty when length < num_chunks.
    """
    if num_chunks < 1:
        raise ValueError("num_chunks must be at least 1")

    chunk_size = length // num_chunks
    for i in range(num_chunks):
        start = i * chunk_size
        end = length if i == num_chunks - 1 else start + chunk_size
        yield start, end


def compress_data(
    data: bytes,
    num_chunks: int = DEFAULT_NUM_CHUNKS,
    progress: ProgressReporter = NO_PROGRESS,
) -> bytes:
    """Gzip data, feeding it to the compressor one chunk at a time"""
    buffer = io.BytesIO()
    view = memoryview(data)
    with progress.track("gzipping", num_chunks) as tick:
        with gzip.GzipFile(fileobj=buffer, mode="wb") as z:
            for start, end in chunk_bounds(len(data), num_chunks):
                if end > start:
                    z.write(view[start:end])
                tick(1)
    return buffer.getvalue()


def write_data(
    data: bytes,
    path: Path,
    num_chunks: int = DEFAULT_NUM_CHUNKS,
    progress: ProgressReporter = NO_PROGRESS,
):
    """
    Write data to path one chunk at a time. Short writes are retried until
    the whole chunk is written.

    Raises:
        FilesystemError: if the file can't be opened or written. A partly
            written file is removed first
    """
    path = Path(path)
    view = memoryview(data)

    try:
        fh = open(path, "wb", buffering=0)
    except OSError as e:
        raise FilesystemError("couldn't write output file", path, e) from e

    try:
        with fh, progress.track("writing", num_chunks) as tick:
            for start, end in chunk_bounds(len(data), num_chunks):
                chunk = view[start:end]
                while chunk:
                    written = fh.write(chunk)
                    if not written:
                        raise OSError(f"wrote 0 of {len(chunk)} bytes")
                    chunk = chunk[written:]
                tick(1)
    except OSError as e:
        logger.debug("removing partly written file %s", path)
        path.unlink(missing_ok=True)
        raise FilesystemError("couldn't write output file", path, e) from e
