"""
Abstract History Storage Interface

DESIGN DECISION: We define an abstract interface for split history.
This allows us to:
1. Keep history in a local JSON file today
2. Use in-memory storage for testing
3. Swap in a database later without touching the session

The interface is intentionally small - a saved split is an immutable
snapshot, so there is no update operation.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from dietsplit.models.split import SavedSplit


class HistoryStorageInterface(ABC):
    """
    Abstract interface for split history.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def save_split(self, split: SavedSplit) -> bool:
        """
        Add a finished split to history.

        Args:
            split: The snapshot to store

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def list_splits(self, limit: int = 50) -> list[SavedSplit]:
        """
        List saved splits, newest first.

        Args:
            limit: Maximum number of results
        """
        pass

    @abstractmethod
    async def get_split(self, split_id: UUID) -> Optional[SavedSplit]:
        """
        Retrieve one split.

        Returns:
            The split if found, None otherwise
        """
        pass

    @abstractmethod
    async def delete_split(self, split_id: UUID) -> bool:
        """
        Remove one split from history.

        Raises:
            NotFoundError: If the split doesn't exist
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass
