"""
Tests for the Finder
"""
import pytest

from core.config import Settings
from core.db import DatabaseManager
from core.exceptions import AdaptationError, ConfigurationError, PartitionConnectionError
from pathfind.finder.services import Finder
from pathfind.lanes.models import FileCategory, Identifier, IDType, QueryFilter
from pathfind.lanes.roles import AssemblyRole, DataRole
from pathfind.tracking.models import QCStatus
from tests.fixtures.progress import RecordingProgress
from tests.fixtures.tracking_data import add_lane


@pytest.fixture(name="finder")
def finder_fixture(settings: Settings, tracking: DatabaseManager):
    return Finder(settings, "pathfind", db_manager=tracking)


def names(lanes):
    return [lane.name for lane in lanes]


def test_role_comes_from_context(settings, tracking):
    assert isinstance(Finder(settings, "pathfind", db_manager=tracking).role, DataRole)
    assert isinstance(Finder(settings, "assemblyfind", db_manager=tracking).role, AssemblyRole)


def test_unknown_context(settings, tracking):
    with pytest.raises(ConfigurationError):
        Finder(settings, "qcfind", db_manager=tracking)


class TestFindLanes:

    def test_searches_every_database(self, finder: Finder):
        lanes = finder.find_lanes(["5477_6"], IDType.LANE)
        assert names(lanes) == ["5477_6#1", "5477_6#2", "5477_6#3", "5477_6#10"]
        assert [lane.database.name for lane in lanes] == [
            "pathogen_track",
            "pathogen_track",
            "prok_track",
            "pathogen_track",
        ]

    def test_lanes_are_sorted(self, finder: Finder):
        lanes = finder.find_lanes(["Streptococcus"], IDType.SPECIES)
        assert names(lanes) == ["9_1#1", "5477_6#1", "5477_6#2", "5477_6#3", "5477_6#10"]

    def test_multiple_ids(self, finder: Finder):
        lanes = finder.find_lanes(["10018_1#1", "9_1#1"], IDType.LANE)
        assert names(lanes) == ["9_1#1", "10018_1#1"]

    def test_duplicate_ids_are_searched_once(self, finder: Finder):
        lanes = finder.find_lanes(["5477_6#1", "5477_6#1"], IDType.LANE)
        assert names(lanes) == ["5477_6#1"]

    def test_nothing_found(self, finder: Finder):
        assert finder.find_lanes(["1234_5#6"], IDType.LANE) == []

    def test_results_are_repeatable(self, finder: Finder):
        first = names(finder.find_lanes(["Streptococcus"], IDType.SPECIES))
        second = names(finder.find_lanes(["Streptococcus"], IDType.SPECIES))
        assert first == second

    def test_files_are_not_looked_for_without_a_filetype(self, finder: Finder):
        lanes = finder.find_lanes(["5477_6"], IDType.LANE)
        assert all(lane.file_category is None for lane in lanes)
        assert not any(lane.has_files() for lane in lanes)

    def test_file_ids_must_be_expanded_first(self, finder: Finder):
        with pytest.raises(ValueError):
            finder.find_lanes(["ids.txt"], IDType.FILE)


class TestFilters:

    def test_qc_filter_keeps_lanes_without_status(self, finder: Finder):
        lanes = finder.find_lanes(
            ["5477_6"], IDType.LANE, QueryFilter(qc_status=QCStatus.PASSED)
        )
        assert names(lanes) == ["5477_6#1", "5477_6#10"]

    def test_qc_filter_failed(self, finder: Finder):
        lanes = finder.find_lanes(
            ["5477_6"], IDType.LANE, QueryFilter(qc_status=QCStatus.FAILED)
        )
        assert names(lanes) == ["5477_6#2", "5477_6#10"]

    def test_filetype_filter_drops_lanes_without_files(self, finder: Finder):
        lanes = finder.find_lanes(
            ["5477_6"], IDType.LANE, QueryFilter(file_category=FileCategory.FASTQ)
        )
        assert names(lanes) == ["5477_6#1", "5477_6#2", "5477_6#3"]
        assert all(lane.has_files() for lane in lanes)
        assert all(lane.file_category == FileCategory.FASTQ for lane in lanes)

    def test_both_filters(self, finder: Finder):
        filters = QueryFilter(qc_status=QCStatus.PASSED, file_category=FileCategory.FASTQ)
        lanes = finder.find_lanes(["5477_6"], IDType.LANE, filters)
        assert names(lanes) == ["5477_6#1"]

    def test_unsupported_filetype(self, finder: Finder):
        with pytest.raises(ValueError):
            finder.find_lanes(["5477_6"], IDType.LANE, QueryFilter(file_category=FileCategory.GFF))


def test_progress_counts_databases_times_ids(settings, tracking):
    progress = RecordingProgress()
    finder = Finder(settings, "pathfind", db_manager=tracking, progress=progress)
    finder.find_lanes(["5477_6", "9_1#1", "5477_6"], IDType.LANE)
    assert progress.tasks["finding lanes"] == {"total": 4, "ticks": 4}


def test_role_that_does_not_fit_a_lane(settings, tracking):
    database = tracking.get_database("prok_track")
    add_lane(
        database.session,
        "7000_1#1",
        study_name="Other study",
        sample_name="sample_3",
        library_name="lib_3",
        storage_path="",
    )
    finder = Finder(settings, "pathfind", db_manager=tracking)
    with pytest.raises(AdaptationError) as excinfo:
        finder.find_lanes(["7000_1#1"], IDType.LANE)
    assert "data" in str(excinfo.value)


def test_unreachable_database(tmp_path):
    settings = Settings(
        DATABASE_URIS={"missing": f"sqlite:///{tmp_path / 'missing' / 'track.db'}"},
        DATA_ROOT=tmp_path,
    )
    manager = DatabaseManager(settings)
    finder = Finder(settings, "pathfind", db_manager=manager)
    with pytest.raises(PartitionConnectionError):
        finder.find_lanes(["5477_6#1"], IDType.LANE)
    manager.close()


def test_database_without_tracking_tables(tmp_path):
    settings = Settings(
        DATABASE_URIS={"empty": f"sqlite:///{tmp_path / 'empty.db'}"},
        DATA_ROOT=tmp_path,
    )
    manager = DatabaseManager(settings)
    finder = Finder(settings, "pathfind", db_manager=manager)
    with pytest.raises(PartitionConnectionError) as excinfo:
        finder.find_lanes(["5477_6"], IDType.LANE)
    assert excinfo.value.name == "empty"
    manager.close()


class TestIdentifiers:

    def test_identifiers_are_searched_by_value(self, finder: Finder):
        ids = [
            Identifier(type=IDType.LANE, value="10018_1#1"),
            Identifier(type=IDType.LANE, value="9_1#1"),
            Identifier(type=IDType.LANE, value="9_1#1"),
        ]
        assert names(finder.find_lanes(ids, IDType.LANE)) == ["9_1#1", "10018_1#1"]

    def test_identifier_of_another_type(self, finder: Finder):
        with pytest.raises(ValueError):
            finder.find_lanes([Identifier(type=IDType.SAMPLE, value="sample_2")], IDType.LANE)
