"""
Tests for stats reports
"""
from types import SimpleNamespace

import pytest

from core.exceptions import FilesystemError, StatsMismatchError
from pathfind.export.stats import collect_stats, stats_to_csv, write_stats_csv


def fake_lane(name, header, row):
    return SimpleNamespace(name=name, stats_headers=lambda: header, stats=lambda: row)


HEADER = ["Lane", "Assembly Type", "Gene Count", "CDS Count"]


def test_collect_stats():
    lanes = [
        fake_lane("5477_6#1", HEADER, ["5477_6#1", "spades", "2", "2"]),
        fake_lane("5477_6#2", HEADER, ["5477_6#2", "NA", "NA", "NA"]),
    ]
    assert collect_stats(lanes) == [
        HEADER,
        ["5477_6#1", "spades", "2", "2"],
        ["5477_6#2", "NA", "NA", "NA"],
    ]


def test_collect_stats_needs_lanes():
    with pytest.raises(ValueError):
        collect_stats([])


def test_row_must_match_header():
    lanes = [
        fake_lane("5477_6#1", HEADER, ["5477_6#1", "spades", "2", "2"]),
        fake_lane("5477_6#2", HEADER, ["5477_6#2", "NA"]),
    ]
    with pytest.raises(StatsMismatchError) as excinfo:
        collect_stats(lanes)
    assert "5477_6#2" in str(excinfo.value)


def test_stats_to_csv():
    rows = [["Lane", "Note"], ["5477_6#1", "has, comma"]]
    assert stats_to_csv(rows) == b'Lane,Note\n5477_6#1,"has, comma"\n'


def test_stats_to_csv_with_tabs():
    rows = [["Lane", "N50"], ["5477_6#1", "18"]]
    assert stats_to_csv(rows, "\t") == b"Lane\tN50\n5477_6#1\t18\n"


def test_write_stats_csv(tmp_path):
    path = tmp_path / "607.stats.csv"
    write_stats_csv([["Lane"], ["5477_6#1"]], path)
    assert path.read_text() == "Lane\n5477_6#1\n"


def test_write_stats_csv_unwritable(tmp_path):
    path = tmp_path / "missing" / "607.stats.csv"
    with pytest.raises(FilesystemError) as excinfo:
        write_stats_csv([["Lane"]], path)
    assert excinfo.value.path == path
