"""
Tests for creating the tracking tables
"""
from sqlalchemy import inspect

from core.db import DatabaseManager
from core.init_db import create_tables


def test_create_tables_in_every_partition(settings):
    manager = DatabaseManager(settings)
    try:
        create_tables(manager)
        for database in manager.databases():
            tables = set(inspect(database.engine).get_table_names())
            assert {"study", "sample", "library", "lane", "lane_file", "mapstats"} <= tables
    finally:
        manager.close()
