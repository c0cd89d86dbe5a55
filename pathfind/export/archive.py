"""
Build tar and zip archives of lane data in memory.

Files are first added under their full paths and then renamed to
"<group>/<file name>", so that everything in the archive sits in a single
folder named after the search ID. Names inside archives always use
forward slashes.
"""

import io
import logging
import tarfile
import warnings
import zipfile
from pathlib import Path, PurePosixPath
from typing import List, Sequence

from core.exceptions import RenameWarning
from core.progress import NO_PROGRESS, ProgressReporter
from pathfind.export.models import ArchiveFormat

logger = logging.getLogger(__name__)


def member_path(path: Path) -> str:
    """The name a file gets when first added: its full path, no leading slash"""
    return Path(path).as_posix().lstrip("/")


def archive_member_name(path: Path, group_name: str, rename_hashes: bool = False) -> str:
    """
    The final name of a file inside the archive. Hashes are always
    replaced in the folder name, and in the file name only if asked.
    """
    basename = Path(path).name
    if rename_hashes:
        basename = basename.replace("#", "_")
    folder = group_name.replace("#", "_")
    return PurePosixPath(folder, basename).as_posix()


class _Archive:
    """Ordered list of (name in archive, file on disk) entries"""

    def __init__(self):
        self._entries: List[list] = []

    @property
    def members(self) -> List[str]:
        return [entry[0] for entry in self._entries]

    def add_file(self, path: Path) -> bool:
        """
        Add a file under its full path. Files that can't be read are
        logged and skipped.
        """
        path = Path(path)
        if not path.is_file():
            logger.warning("couldn't add '%s' to archive: not a readable file", path)
            return False
        self._entries.append([member_path(path), path])
        return True

    def rename(self, old_name: str, new_name: str) -> bool:
        """Rename the first entry called old_name. False if there isn't one"""
        for entry in self._entries:
            if entry[0] == old_name:
                entry[0] = new_name
                return True
        return False


class TarArchive(_Archive):

    def to_bytes(self) -> bytes:
        """
        Serialise the archive. Raises OSError if a file can't be read.
        """
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w") as tar:
            for name, path in self._entries:
                info = tar.gettarinfo(str(path), arcname=name)
                with open(path, "rb") as fh:
                    tar.addfile(info, fh)
        return buffer.getvalue()


class ZipArchive(_Archive):

    def write(self, target: Path):
        """
        Write the archive to target. Raises OSError if it can't be written.
        """
        with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for name, path in self._entries:
                zf.write(path, arcname=name)


class ArchiveBuilder:
    """Collects files into an archive and gives them archive-relative names"""

    archive_class = _Archive

    def __init__(self, progress: ProgressReporter = NO_PROGRESS):
        self.progress = progress

    def build(
        self,
        files: Sequence[Path],
        *,
        group_name: str,
        rename_hashes: bool = False,
    ):
        archive = self.archive_class()

        with self.progress.track("adding files", len(files)) as tick:
            for path in files:
                archive.add_file(path)
                tick(1)

        for path in files:
            old_name = member_path(path)
            new_name = archive_member_name(path, group_name, rename_hashes)
            logger.debug("renaming |%s| to |%s|", old_name, new_name)

            if not archive.rename(old_name, new_name):
                message = f"WARNING: couldn't rename '{old_name}' in archive"
                logger.warning(message)
                warnings.warn(message, RenameWarning, stacklevel=2)

        return archive


class TarArchiveBuilder(ArchiveBuilder):
    archive_class = TarArchive


class ZipArchiveBuilder(ArchiveBuilder):
    archive_class = ZipArchive


def builder_for(archive_format: ArchiveFormat, progress: ProgressReporter = NO_PROGRESS) -> ArchiveBuilder:
    if archive_format == ArchiveFormat.ZIP:
        return ZipArchiveBuilder(progress)
    return TarArchiveBuilder(progress)
