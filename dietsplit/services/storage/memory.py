"""In-memory history storage, used in tests and for throwaway sessions."""

from typing import Optional
from uuid import UUID

from dietsplit.models.split import SavedSplit
from dietsplit.services.storage.interface import HistoryStorageInterface, NotFoundError


class InMemoryHistoryStorage(HistoryStorageInterface):

    def __init__(self, max_entries: int = 50):
        self._splits: list[SavedSplit] = []
        self._max_entries = max_entries

    async def save_split(self, split: SavedSplit) -> bool:
        self._splits.insert(0, split.model_copy(deep=True))
        del self._splits[self._max_entries:]
        return True

    async def list_splits(self, limit: int = 50) -> list[SavedSplit]:
        return [s.model_copy(deep=True) for s in self._splits[:limit]]

    async def get_split(self, split_id: UUID) -> Optional[SavedSplit]:
        for split in self._splits:
            if split.id == split_id:
                return split.model_copy(deep=True)
        return None

    async def delete_split(self, split_id: UUID) -> bool:
        for index, split in enumerate(self._splits):
            if split.id == split_id:
                del self._splits[index]
                return True
        raise NotFoundError(f"Split not found: {split_id}")
