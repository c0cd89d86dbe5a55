"""
A lane found by the Finder, wrapped up with the database it came from
and the role that tells it where its files are.
"""

import logging
import os
import sys
from pathlib import Path
from typing import List, TextIO

from core.db import Database
from core.exceptions import FilesystemError
from pathfind.lanes.models import FileCategory, FileRef
from pathfind.lanes.roles import LaneRole
from pathfind.tracking.models import Lane as LaneRow, QCStatus

logger = logging.getLogger(__name__)


class Lane:
    """
    One sequencing lane and its files.

    The database is set once, when the lane is built; it's needed to work
    out where the lane's files are on disk. Files are only looked for when
    find_files is called.
    """

    def __init__(self, row: LaneRow, database: Database, role: LaneRole):
        role.check(row)
        self._row = row
        self._database = database
        self._role = role
        self._files: List[FileRef] = []
        self._category: FileCategory | None = None

    @property
    def row(self) -> LaneRow:
        return self._row

    @property
    def database(self) -> Database:
        return self._database

    @property
    def role(self) -> LaneRole:
        return self._role

    @property
    def name(self) -> str:
        return self._row.name

    @property
    def qc_status(self) -> QCStatus | None:
        return self._row.qc_status

    @property
    def files(self) -> List[FileRef]:
        return list(self._files)

    @property
    def file_category(self) -> FileCategory | None:
        """The category of the last search for files, if any"""
        return self._category

    def find_files(self, category: FileCategory):
        """
        Look for files of the given category. Asking for the same category
        twice does nothing; asking for another category replaces the files
        found so far. Finding no files is not an error.
        """
        if category == self._category:
            return

        paths = self._role.find_files(self, category)
        self._files = [FileRef(path=path, category=category) for path in paths]
        self._category = category

        if not self._files:
            logger.debug("no %s files for lane '%s'", category.value, self.name)

    def has_files(self) -> bool:
        return len(self._files) > 0

    def stats_headers(self) -> List[str]:
        return self._role.stats_header()

    def stats(self) -> List[str]:
        return self._role.stats_row(self)

    def _paths(self) -> List[Path]:
        if self._files:
            return [f.path for f in self._files]
        return self._role.root_dirs(self)

    def print_paths(self, stream: TextIO | None = None):
        """
        Print the paths to the files that were found, or to the lane's
        directory if no files were looked for.
        """
        stream = stream or sys.stdout
        for path in self._paths():
            print(path, file=stream)

    def make_symlinks(self, dest: Path, rename: bool = False) -> List[Path]:
        """
        Link the lane's files (or its directory) into dest.

        Args:
            dest: Directory in which to create the links
            rename: Convert hashes in file names into underscores

        Returns:
            The links that were created

        Raises:
            FilesystemError: if dest isn't a directory, or a link can't be made
        """
        dest = Path(dest)
        if not dest.is_dir():
            raise FilesystemError("not a directory", dest)

        links = []
        for source in self._paths():
            link_name = source.name.replace("#", "_") if rename else source.name
            link = dest / link_name

            if link.exists() or link.is_symlink():
                logger.warning("'%s' already exists; not linking %s", link, source)
                continue

            try:
                os.symlink(source, link)
            except OSError as e:
                raise FilesystemError("couldn't create link", link, e) from e
            links.append(link)

        return links

    def __repr__(self):
        return f"Lane(name={self.name!r}, database={self._database.name!r}, role={self._role.name!r})"
