"""
Utility modules for the job hunter application.

AutoApplicant depends on the tracker, so import it from
job_hunter.utils.auto_apply directly.
"""

from .config import Config
from .storage import JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    "Config",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
]
