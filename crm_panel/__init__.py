"""CRM back office: customers, leads, projects, staff, billing and analytics."""

from .app import ControlPanel, configure_logging  # noqa: F401
from .config import DatabaseConfig, Settings  # noqa: F401
from .storage import FileStore, KeyValueStore, MemoryStore, PostgresStore, create_store  # noqa: F401

__version__ = "0.1.0"
