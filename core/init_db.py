"""
Initialize the tracking databases, creating the tables
in every configured partition.
"""
from core.config import get_settings
from core.db import DatabaseManager
from core.logger import logger

# Import the models so that their tables are registered with SQLModel
import pathfind.tracking.models  # pylint: disable=unused-import


def create_tables(manager: DatabaseManager):
  """
  Create the tracking tables in all partitions
  """
  for database in manager.databases():
    logger.info(f"Creating tables in {database.name}")
    database.create_tables()


def main():
  logger.info("Create tables...")
  manager = DatabaseManager(get_settings())
  try:
    create_tables(manager)
  finally:
    manager.close()


if __name__ == "__main__":
  main()
