"""
Storage Services Package

Provides the abstract history interface and concrete implementations.
Currently implements a JSON file backend, but designed to be swappable.
"""

from dietsplit.services.storage.interface import (
    HistoryStorageInterface,
    NotFoundError,
    StorageError,
)
from dietsplit.services.storage.json_file import JsonFileHistoryStorage
from dietsplit.services.storage.memory import InMemoryHistoryStorage

__all__ = [
    # Interfaces
    "HistoryStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryHistoryStorage",
    "JsonFileHistoryStorage",
]
