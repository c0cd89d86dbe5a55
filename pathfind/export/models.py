"""
Models for the export actions
"""
from enum import Enum
from pathlib import Path
from typing import Literal, Union
from sqlmodel import SQLModel
from pydantic import ConfigDict, field_validator


class ArchiveFormat(str, Enum):
    TAR = "tar"
    TAR_GZ = "tar.gz"
    ZIP = "zip"

    @property
    def suffix(self) -> str:
        return f".{self.value}"


class OptionMode(str, Enum):
    """How a dual-purpose option was given on the command line"""
    OFF = "off"
    DEFAULT_NAME = "default"
    NAMED = "named"


class OptionValue(SQLModel):
    """
    A command line option that's either a switch ("-a") or takes a value
    ("-a my.tar.gz"). The mode is decided once, when the arguments are
    parsed.
    """
    mode: OptionMode = OptionMode.OFF
    value: Path | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_set(self) -> bool:
        return self.mode != OptionMode.OFF


class ListPaths(SQLModel):
    kind: Literal["list"] = "list"

    model_config = ConfigDict(frozen=True)


class Symlink(SQLModel):
    kind: Literal["symlink"] = "symlink"
    destination: Path | None = None

    model_config = ConfigDict(frozen=True)


class Archive(SQLModel):
    kind: Literal["archive"] = "archive"
    format: ArchiveFormat = ArchiveFormat.TAR_GZ
    target: Path | None = None

    model_config = ConfigDict(frozen=True)


class Stats(SQLModel):
    kind: Literal["stats"] = "stats"
    target: Path | None = None
    separator: str = ","

    model_config = ConfigDict(frozen=True)

    @field_validator("separator")
    @classmethod
    def single_character(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError("CSV separator must be a single character")
        return value


ExportRequest = Union[ListPaths, Symlink, Archive, Stats]
