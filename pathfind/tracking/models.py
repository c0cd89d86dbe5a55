"""
Models for the sequencing tracking databases.

Each partition holds the same schema: studies contain samples, samples
have libraries, and libraries are sequenced on lanes. Lanes carry their
own QC status and the relative path to their data on disk.
"""
from enum import Enum
from typing import List, Optional
from sqlmodel import SQLModel, Field, Relationship


class QCStatus(str, Enum):
    """Manual QC states for a lane"""
    PASSED = "passed"
    FAILED = "failed"
    PENDING = "pending"


class Study(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    ssid: int | None = Field(default=None, index=True)
    name: str = Field(max_length=255, index=True)

    samples: List["Sample"] = Relationship(back_populates="study")


class Sample(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    ssid: int | None = Field(default=None, index=True)
    name: str = Field(max_length=255, index=True)
    species: str | None = Field(default=None, max_length=255)
    study_id: int = Field(foreign_key="study.id")

    study: Study = Relationship(back_populates="samples")
    libraries: List["Library"] = Relationship(back_populates="sample")


class Library(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    ssid: int | None = Field(default=None, index=True)
    name: str = Field(max_length=255, index=True)
    sample_id: int = Field(foreign_key="sample.id")

    sample: Sample = Relationship(back_populates="libraries")
    lanes: List["Lane"] = Relationship(back_populates="library")


class Lane(SQLModel, table=True):
    """
    One sequencing lane, e.g. "5477_6#1". The storage_path is relative to
    the root directory of the partition the lane belongs to.
    """
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=255, index=True)
    library_id: int = Field(foreign_key="library.id")
    qc_status: QCStatus | None = Field(default=None)
    npg_qc_status: str | None = Field(default=None, max_length=20)
    storage_path: str | None = Field(default=None, max_length=1024)
    read_length: int | None = None
    raw_reads: int | None = None
    raw_bases: int | None = None
    paired: bool = True

    library: Library = Relationship(back_populates="lanes")
    files: List["LaneFile"] = Relationship(back_populates="lane")
    mapstats: List["Mapstats"] = Relationship(back_populates="lane")


class LaneFile(SQLModel, table=True):
    """A data file registered against a lane, e.g. "5477_6#1_1.fastq.gz" """
    __tablename__ = "lane_file"

    id: int | None = Field(default=None, primary_key=True)
    lane_id: int = Field(foreign_key="lane.id", index=True)
    name: str = Field(max_length=255)
    md5: str | None = Field(default=None, max_length=32)

    lane: Lane = Relationship(back_populates="files")


class Mapstats(SQLModel, table=True):
    """
    Mapping statistics for a lane. QC mappings are made against a
    reference chosen by the QC pipeline; the rest come from mapping
    pipelines.
    """
    id: int | None = Field(default=None, primary_key=True)
    lane_id: int = Field(foreign_key="lane.id", index=True)
    is_qc: bool = False
    mapper: str | None = Field(default=None, max_length=50)
    reference: str | None = Field(default=None, max_length=255)
    reference_size: int | None = None
    reads_mapped: int | None = None
    reads_paired: int | None = None
    mean_insert: float | None = None
    adapter_perc: float | None = None
    transposon_perc: float | None = None
    error_rate: float | None = None

    lane: Optional[Lane] = Relationship(back_populates="mapstats")
