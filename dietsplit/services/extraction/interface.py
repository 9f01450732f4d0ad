"""
Abstract Dish Extraction Interface

DESIGN DECISION: Turning free text ("pizza 18, tofu curry 15...") into
dishes is an external capability. The engine only knows this interface:
1. Any provider (LLM, regex, test fake) can be swapped in
2. The engine never sees network behaviour or response schemas
3. A failing provider can never corrupt a split

Output is a list of ExtractedDish triples. The engine inserts them exactly
as if a person had typed them.
"""

from abc import ABC, abstractmethod

from dietsplit.models.split import ExtractedDish


class DishExtractor(ABC):
    """Capability: propose dishes from free text."""

    @abstractmethod
    async def extract_dishes(self, text: str) -> list[ExtractedDish]:
        """
        Extract dishes from a receipt or meal description.

        Args:
            text: Free text describing what was ordered

        Returns:
            Zero or more proposed dishes

        Raises:
            ExtractionError: If the provider can't produce a result
        """
        pass


class ExtractionError(Exception):
    """Base exception for dish extraction."""
    pass


class ExtractionUnavailableError(ExtractionError):
    """Provider not configured or not reachable."""
    pass


class MalformedExtractionError(ExtractionError):
    """Provider answered with something that isn't a dish list."""
    pass
