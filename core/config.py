"""
Application Configuration
Add constants, partitions and behaviour mappings here
"""

from functools import lru_cache
import os
from pathlib import Path
from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load .env file into os.environ so os.getenv() works correctly
# This must happen before Settings class is instantiated
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


DEFAULT_LANE_ROLES = {
    "pathfind": "data",
    "annotationfind": "annotation",
    "assemblyfind": "assembly",
}


# Define settings class for univeral access
class Settings(BaseSettings):
    # Partition name -> SQLAlchemy URI. Partitions are searched in this order
    DATABASE_URIS: dict[str, str] = {"pathogen_track": "sqlite://"}

    # Root of the on-disk data hierarchy
    DATA_ROOT: Path = Path("/lustre/scratch/pathogen")

    # Calling context (script name) -> lane role
    LANE_ROLES: dict[str, str] = dict(DEFAULT_LANE_ROLES)

    NO_PROGRESS_BARS: bool = False
    LOG_LEVEL: str = "WARNING"

    # Chunk count for compressing and writing archives
    NUM_CHUNKS: int = 100

    @computed_field
    @property
    def PARTITION_NAMES(self) -> list[str]:
        """Partition names in search order"""
        return list(self.DATABASE_URIS)

    def partition_root(self, name: str) -> Path:
        """Directory holding the lane data for a partition"""
        return self.DATA_ROOT / name / "seq-pipelines"

    # Read environment variables from .env file, if it exists
    # extra='ignore' prevents validation errors from extra env vars
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class InMemoryDbSettings(Settings):
    """Settings used when SETTINGS_MODE=test"""
    TESTING: bool = True
    DATABASE_URIS: dict[str, str] = {"test_track": "sqlite:///:memory:"}
    NO_PROGRESS_BARS: bool = True


# Export settings
@lru_cache
def get_settings() -> Settings:
    """
    Get settings instance, cached for performance
    """
    if os.getenv("SETTINGS_MODE") == "test":
        return InMemoryDbSettings()
    return Settings()


if __name__ == "__main__":
    # To use in other modules
    # from core.config import get_settings
    print(get_settings().DATABASE_URIS)
