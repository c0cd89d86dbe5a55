"""
Exceptions raised while finding and exporting lanes.

Fatal errors derive from PathFindError and stop the run; the command line
layer reports them and exits non-zero. RenameWarning is the only
non-fatal condition and is emitted through the warnings module.
"""

from pathlib import Path


class PathFindError(Exception):
    """Base class for all fatal pathfind errors"""


class ConfigurationError(PathFindError):
    """No lane role could be found for the calling context"""


class AdaptationError(PathFindError):
    """A lane role could not be applied to a row from the database"""


class PartitionConnectionError(PathFindError, ConnectionError):
    """A tracking database is unknown or unreachable"""

    def __init__(self, name: str, cause: Exception | None = None):
        self.name = name
        self.cause = cause
        message = f"ERROR: couldn't connect to database '{name}'"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class FilesystemError(PathFindError):
    """An output file or directory could not be created or written"""

    def __init__(self, message: str, path: Path | str, cause: Exception | None = None):
        self.path = Path(path)
        self.cause = cause
        text = f"ERROR: {message} ({path})"
        if cause is not None:
            text += f": {cause}"
        super().__init__(text)


class StatsMismatchError(PathFindError):
    """A stats row doesn't have the same number of columns as the header"""


class RenameWarning(UserWarning):
    """A file couldn't be renamed inside an archive"""
