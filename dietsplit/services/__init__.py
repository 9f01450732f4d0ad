"""Services package."""

from dietsplit.services.extraction import (
    DishExtractor,
    ExtractionError,
    ExtractionUnavailableError,
    GeminiDishExtractor,
    MalformedExtractionError,
)
from dietsplit.services.storage import (
    HistoryStorageInterface,
    InMemoryHistoryStorage,
    JsonFileHistoryStorage,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Extraction services
    "DishExtractor",
    "ExtractionError",
    "ExtractionUnavailableError",
    "GeminiDishExtractor",
    "MalformedExtractionError",
    # Storage services
    "HistoryStorageInterface",
    "InMemoryHistoryStorage",
    "JsonFileHistoryStorage",
    "NotFoundError",
    "StorageError",
]
