"""
Tests for the database manager
"""
import pytest

from core.config import Settings
from core.db import DatabaseManager
from core.exceptions import PartitionConnectionError
from core.logger import mask_uri


def test_database_names_keep_configured_order(settings):
    manager = DatabaseManager(settings)
    assert manager.database_names == ["pathogen_track", "prok_track"]


def test_get_database_is_cached(db_manager):
    first = db_manager.get_database("pathogen_track")
    assert db_manager.get_database("pathogen_track") is first
    assert first.name == "pathogen_track"


def test_database_data_root(db_manager, settings):
    database = db_manager.get_database("prok_track")
    assert database.data_root == settings.DATA_ROOT / "prok_track" / "seq-pipelines"


def test_unknown_database(db_manager):
    with pytest.raises(PartitionConnectionError) as excinfo:
        db_manager.get_database("no_such_track")
    assert "no_such_track" in str(excinfo.value)
    assert excinfo.value.name == "no_such_track"


def test_bad_uri(tmp_path):
    settings = Settings(DATABASE_URIS={"broken": "notadialect://nowhere"})
    manager = DatabaseManager(settings)
    with pytest.raises(PartitionConnectionError):
        manager.get_database("broken")


def test_unreachable_database(tmp_path):
    """A sqlite file in a directory that doesn't exist can't be opened"""
    uri = f"sqlite:///{tmp_path / 'missing' / 'track.db'}"
    manager = DatabaseManager(Settings(DATABASE_URIS={"missing": uri}))
    with pytest.raises(PartitionConnectionError) as excinfo:
        manager.get_database("missing")
    assert isinstance(excinfo.value, ConnectionError)


def test_close_forgets_databases(db_manager):
    db_manager.get_database("pathogen_track")
    db_manager.close()
    assert db_manager._databases == {}


def test_mask_uri():
    assert mask_uri("mysql+pymysql://user:secret@db:3306/track") == "mysql+pymysql://user:*****@db:3306/track"
    assert mask_uri("sqlite:///track.db") == "sqlite:///track.db"
