"""
Services for exporting found lanes: listing paths, making symlinks,
building archives and writing stats reports.
"""

import re
import sys
import tempfile
from pathlib import Path
from typing import List, Sequence, TextIO, Tuple

from core.exceptions import FilesystemError
from core.logger import logger
from core.progress import NO_PROGRESS, ProgressReporter
from pathfind.export.archive import builder_for
from pathfind.export.chunked import DEFAULT_NUM_CHUNKS, compress_data, write_data
from pathfind.export.models import (
    Archive,
    ArchiveFormat,
    ExportRequest,
    ListPaths,
    Stats,
    Symlink,
)
from pathfind.export.stats import collect_stats, write_stats_csv
from pathfind.lanes.lane import Lane
from pathfind.lanes.models import IDType


def sanitize_id(id: str, id_type: IDType | None = None) -> str:
    """
    Make an ID safe for use in a file name. IDs read from a file are
    replaced by the name of the file.
    """
    if id_type == IDType.FILE:
        id = Path(id).name
    return re.sub(r"[#/\\]", "_", id)


class Exporter:
    """
    Runs exactly one export action over a list of lanes.

    Args:
        label: Sanitised search ID, used to build default output names
            and as the folder name inside archives
        rename: Convert hashes to underscores in linked and archived
            file names
        separator: CSV separator for the stats file inside archives
        num_chunks: Number of chunks for compressing and writing archives
        progress: Progress reporter
        cwd: Directory for outputs with default names
    """

    def __init__(
        self,
        *,
        label: str,
        rename: bool = False,
        separator: str = ",",
        num_chunks: int = DEFAULT_NUM_CHUNKS,
        progress: ProgressReporter = NO_PROGRESS,
        cwd: Path | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ):
        self.label = label
        self.rename = rename
        if len(separator) != 1:
            raise ValueError("CSV separator must be a single character")
        self.separator = separator
        self.num_chunks = num_chunks
        self.progress = progress
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr

    def export(self, lanes: Sequence[Lane], request: ExportRequest):
        """
        Dispatch to the requested action. With no lanes nothing is written;
        a message goes to stderr instead.
        """
        if not lanes:
            print("No data found.", file=self.stderr)
            return None

        if isinstance(request, Symlink):
            return self.make_symlinks(lanes, request)
        if isinstance(request, Archive):
            return self.make_archive(lanes, request)
        if isinstance(request, Stats):
            return self.make_stats(lanes, request)
        if isinstance(request, ListPaths):
            return self.list_paths(lanes)
        raise TypeError(f"unknown export request: {request!r}")

    #---------------------------------------

    def list_paths(self, lanes: Sequence[Lane]):
        for lane in lanes:
            lane.print_paths(self.stdout)

    #---------------------------------------

    def make_symlinks(self, lanes: Sequence[Lane], request: Symlink) -> Path:
        """Link the files for every lane into a single directory"""
        if request.destination is not None:
            logger.debug("symlink request specifies a dir name")
            dest = Path(request.destination)
        else:
            logger.debug("symlink request has no dir name; building one")
            dest = self.cwd / f"pathfind_{self.label}"

        try:
            dest.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError("couldn't make link directory", dest, e) from e

        if not dest.is_dir():
            raise FilesystemError("not a directory", dest)

        print(f"Creating links in '{dest}'", file=self.stderr)

        with self.progress.track("linking", len(lanes)) as tick:
            for lane in lanes:
                lane.make_symlinks(dest, rename=self.rename)
                tick(1)

        return dest

    #---------------------------------------

    def make_archive(self, lanes: Sequence[Lane], request: Archive) -> List[str]:
        """
        Archive the data files for every lane, plus a stats.csv, and print
        the names of the archive members.
        """
        if request.target is not None:
            target = Path(request.target)
        else:
            target = self.cwd / f"pathfind_{self.label}{request.format.suffix}"

        print(f"Archiving lane data to '{target}'", file=self.stderr)

        filenames, stats = self._collect_filenames(lanes)

        with tempfile.TemporaryDirectory() as temp_dir:
            stats_file = Path(temp_dir) / "stats.csv"
            write_stats_csv(stats, stats_file, self.separator)
            filenames.append(stats_file)

            builder = builder_for(request.format, self.progress)
            archive = builder.build(
                filenames,
                group_name=self.label,
                rename_hashes=self.rename,
            )

            if request.format == ArchiveFormat.ZIP:
                self._write_zip(archive, target)
            else:
                self._write_tar(archive, target, compress=request.format == ArchiveFormat.TAR_GZ)

        for member in archive.members:
            print(member, file=self.stdout)

        return archive.members

    def _collect_filenames(self, lanes: Sequence[Lane]) -> Tuple[List[Path], List[List[str]]]:
        """Data files for all of the lanes, and their stats"""
        filenames = []
        with self.progress.track("finding files", len(lanes)) as tick:
            for lane in lanes:
                # lanes found without a file type have only looked for their
                # directory, so look for the default type of file now
                if lane.file_category is None and lane.role.default_category is not None:
                    lane.find_files(lane.role.default_category)
                filenames.extend(f.path for f in lane.files)
                tick(1)

        stats = collect_stats(lanes, self.progress)
        return filenames, stats

    def _write_zip(self, archive, target: Path):
        print("Writing zip file... ", end="", file=self.stderr)
        try:
            archive.write(target)
        except OSError as e:
            print("failed", file=self.stderr)
            if target.is_file():
                target.unlink()
            raise FilesystemError("error while writing zip file", target, e) from e
        print("done", file=self.stderr)

    def _write_tar(self, archive, target: Path, compress: bool):
        # building the tar contents can't be broken up for a progress bar,
        # so at least tell the user what's going on
        print("Building tar file... ", end="", file=self.stderr)
        try:
            data = archive.to_bytes()
        except OSError as e:
            print("failed", file=self.stderr)
            raise FilesystemError("couldn't build tar file", target, e) from e
        print("done", file=self.stderr)

        if compress:
            data = compress_data(data, self.num_chunks, self.progress)

        write_data(data, target, self.num_chunks, self.progress)

    #---------------------------------------

    def make_stats(self, lanes: Sequence[Lane], request: Stats) -> Path:
        """Write a CSV file with the stats for every lane"""
        if request.target is not None:
            logger.debug("stats request specifies a filename")
            target = Path(request.target)
        else:
            logger.debug("stats request has no filename; building one")
            target = self.cwd / f"{self.label}.stats.csv"

        rows = collect_stats(lanes, self.progress)
        write_stats_csv(rows, target, request.separator)
        return target
