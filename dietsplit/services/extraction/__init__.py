"""Dish extraction services."""

from dietsplit.services.extraction.interface import (
    DishExtractor,
    ExtractionError,
    ExtractionUnavailableError,
    MalformedExtractionError,
)
from dietsplit.services.extraction.gemini_service import GeminiDishExtractor

__all__ = [
    "DishExtractor",
    "ExtractionError",
    "ExtractionUnavailableError",
    "GeminiDishExtractor",
    "MalformedExtractionError",
]
