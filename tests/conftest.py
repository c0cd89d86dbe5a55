from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from core.config import Settings
from core.db import DatabaseManager
from pathfind.tracking.models import QCStatus
from tests.fixtures.tracking_data import add_lane, fastq_names, lane_files_on_disk, write_files


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="settings")
def settings_fixture(tmp_path: Path) -> Settings:
    """Two file-backed partitions, searched in the order given"""
    return Settings(
        DATABASE_URIS={
            "pathogen_track": f"sqlite:///{tmp_path / 'pathogen_track.db'}",
            "prok_track": f"sqlite:///{tmp_path / 'prok_track.db'}",
        },
        DATA_ROOT=tmp_path / "data",
        NO_PROGRESS_BARS=True,
        NUM_CHUNKS=10,
    )


@pytest.fixture(name="db_manager")
def db_manager_fixture(settings: Settings):
    manager = DatabaseManager(settings)
    for database in manager.databases():
        database.create_tables()
    yield manager
    manager.close()


@pytest.fixture(name="tracking")
def tracking_fixture(db_manager: DatabaseManager):
    """
    Populate both partitions.

    pathogen_track:
        study 607 "Test study"
            sample_1 (S. pneumoniae): 5477_6#1 passed, 5477_6#2 failed,
                5477_6#10 no QC status and no files on disk
            sample_2 (S. aureus): 10018_1#1 passed
    prok_track:
        study 700 "Other study"
            sample_3 (S. suis): 5477_6#3 pending, 9_1#1 no QC status
    """
    first = db_manager.get_database("pathogen_track")
    second = db_manager.get_database("prok_track")

    def add(database, lane_name, on_disk=True, **kwargs):
        lane = add_lane(database.session, lane_name, files=fastq_names(lane_name), **kwargs)
        if on_disk:
            write_files(database.data_root / lane.storage_path, lane_files_on_disk(lane_name))
        return lane

    add(
        first, "5477_6#1",
        qc_status=QCStatus.PASSED,
        read_length=75,
        raw_reads=1000,
        raw_bases=75000,
        npg_qc_status="pass",
        mapstats={
            "is_qc": True,
            "mapper": "bwa",
            "reference": "Streptococcus_pneumoniae_ATCC_700669",
            "reference_size": 2221315,
            "reads_mapped": 900,
            "reads_paired": 800,
            "mean_insert": 250.0,
            "adapter_perc": 0.5,
            "transposon_perc": 0.1,
            "error_rate": 0.002,
        },
    )
    add(first, "5477_6#2", qc_status=QCStatus.FAILED)
    add(first, "5477_6#10", on_disk=False)
    add(
        first, "10018_1#1",
        qc_status=QCStatus.PASSED,
        sample_name="sample_2",
        species="Staphylococcus aureus",
        library_name="lib_2",
    )

    other = dict(
        study_name="Other study",
        study_ssid=700,
        sample_name="sample_3",
        species="Streptococcus suis",
        library_name="lib_3",
    )
    add(second, "5477_6#3", qc_status=QCStatus.PENDING, **other)
    add(second, "9_1#1", **other)

    return db_manager
