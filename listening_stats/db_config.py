"""Database location and connection string management"""
import os
from dataclasses import dataclass

from listening_stats.config import Settings

MEMORY_PATH = ":memory:"

@dataclass
class DatabaseConfig:
    """Location of the local SQLite database"""
    path: str

    @property
    def in_memory(self) -> bool:
        return self.path == MEMORY_PATH

    def to_connection_string(self) -> str:
        """Generate the SQLAlchemy connection string for the database file"""
        if self.in_memory:
            return "sqlite://"
        return f"sqlite:///{os.path.abspath(self.path)}"

    def ensure_parent_folder(self) -> None:
        """Create the folder holding the database file when it does not exist yet"""
        if self.in_memory:
            return
        folder = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(folder, exist_ok=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> 'DatabaseConfig':
        """Create the config from application settings"""
        if not settings.DB_PATH:
            raise ValueError("DB_PATH setting is required")
        return cls(path=settings.DB_PATH)
