"""
Database configuration

Each partition of the tracking data is a separate database. The
DatabaseManager hands out one Database handle per partition; handles are
created lazily and live for the rest of the run.
"""
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, Session, create_engine

from core.config import Settings
from core.exceptions import PartitionConnectionError
from core.logger import logger, mask_uri


class Database:
    """
    A single tracking database (partition) and the place on disk where the
    data for its lanes live.
    """

    def __init__(self, name: str, uri: str, data_root: Path):
        self.name = name
        self.uri = uri
        self.data_root = data_root
        self.engine = create_engine(uri, echo=False)
        self._session: Session | None = None

    @property
    def session(self) -> Session:
        """
        The session for this database. Rows loaded through it keep loading
        their relationships until the database is closed.
        """
        if self._session is None:
            self._session = Session(self.engine)
        return self._session

    def create_tables(self):
        """Create the tracking tables if they don't already exist"""
        SQLModel.metadata.create_all(self.engine)

    def check_connection(self):
        """Raise PartitionConnectionError unless the database answers"""
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise PartitionConnectionError(self.name, e) from e

    def close(self):
        if self._session is not None:
            self._session.close()
            self._session = None
        self.engine.dispose()

    def __repr__(self):
        return f"Database(name={self.name!r}, uri={mask_uri(self.uri)!r})"


class DatabaseManager:
    """
    Registry of the configured partitions. Every partition is searched for
    every ID, so the manager only needs to enumerate them in a stable order
    and open them by name.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._databases: dict[str, Database] = {}

    @property
    def database_names(self) -> list[str]:
        """Partition names, in the order they were configured"""
        return list(self.settings.DATABASE_URIS)

    def get_database(self, name: str) -> Database:
        """
        Return the handle for the named partition, connecting to it on first
        use.

        Raises:
            PartitionConnectionError: if the partition isn't configured or
                doesn't answer
        """
        if name in self._databases:
            return self._databases[name]

        uri = self.settings.DATABASE_URIS.get(name)
        if uri is None:
            raise PartitionConnectionError(name, KeyError(f"no such database: {name}"))

        logger.debug("connecting to database '%s' at %s", name, mask_uri(uri))
        try:
            database = Database(name, uri, self.settings.partition_root(name))
        except (SQLAlchemyError, ValueError) as e:
            # bad URIs fail in create_engine
            raise PartitionConnectionError(name, e) from e
        database.check_connection()

        self._databases[name] = database
        return database

    def databases(self) -> list[Database]:
        """Handles for every configured partition, in search order"""
        return [self.get_database(name) for name in self.database_names]

    def close(self):
        for database in self._databases.values():
            database.close()
        self._databases.clear()
