"""
Models shared by the finder, the lanes and the exporters
"""
from enum import Enum
from pathlib import Path
from sqlmodel import SQLModel
from pydantic import ConfigDict, field_validator

from pathfind.tracking.models import QCStatus


class IDType(str, Enum):
    """Kinds of ID that can be searched for"""
    STUDY = "study"
    SAMPLE = "sample"
    LIBRARY = "library"
    LANE = "lane"
    SPECIES = "species"
    FILE = "file"


class FileCategory(str, Enum):
    """Categories of data file that a lane role knows how to find"""
    # sequencing data
    FASTQ = "fastq"
    BAM = "bam"
    PACBIO = "pacbio"
    CORRECTED = "corrected"
    # assemblies
    CONTIGS = "contigs"
    SCAFFOLD = "scaffold"
    # annotation
    GFF = "gff"
    FAA = "faa"
    FFN = "ffn"
    GBK = "gbk"


class Identifier(SQLModel):
    """An ID and the kind of thing it identifies"""
    type: IDType
    value: str

    model_config = ConfigDict(frozen=True)

    @field_validator("value")
    @classmethod
    def value_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("ID must not be empty")
        return value.strip()


class QueryFilter(SQLModel):
    """Optional filters applied to the lanes found for a set of IDs"""
    qc_status: QCStatus | None = None
    file_category: FileCategory | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class FileRef(SQLModel):
    """A data file found on disk for a lane"""
    path: Path
    category: FileCategory

    model_config = ConfigDict(frozen=True)

    @property
    def name(self) -> str:
        return self.path.name
