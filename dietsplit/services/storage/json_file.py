"""
JSON File History Storage

DESIGN DECISION: History lives in a single local JSON file because:
1. No server or database is needed for a personal tool
2. The file is human-readable and easy to back up
3. Snapshots are small and few

TRADEOFFS:
- The whole file is rewritten on every save (fine for tens of splits)
- No concurrent writers; one process owns the file

A corrupt or unreadable file is treated as empty history and logged,
so a bad file never blocks starting a new split.
"""

import json
from pathlib import Path
from typing import Optional, Union
from uuid import UUID

from pydantic import TypeAdapter, ValidationError

from dietsplit.audit import get_logger
from dietsplit.config import get_settings
from dietsplit.models.split import SavedSplit
from dietsplit.services.storage.interface import (
    HistoryStorageInterface,
    NotFoundError,
    StorageError,
)


_SPLIT_LIST = TypeAdapter(list[SavedSplit])


class JsonFileHistoryStorage(HistoryStorageInterface):
    """Split history stored newest-first in one JSON file."""

    def __init__(
        self,
        file_path: Optional[Union[str, Path]] = None,
        max_entries: Optional[int] = None,
    ):
        if file_path is None or max_entries is None:
            settings = get_settings().history
            file_path = file_path if file_path is not None else settings.file_path
            max_entries = max_entries if max_entries is not None else settings.max_entries
        self._path = Path(file_path)
        self._max_entries = max_entries
        self._logger = get_logger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> list[SavedSplit]:
        if not self._path.exists():
            return []
        try:
            raw = self._path.read_text(encoding="utf-8")
            if not raw.strip():
                return []
            return _SPLIT_LIST.validate_json(raw)
        except (OSError, ValidationError, ValueError) as e:
            self._logger.warning(
                "history_load_failed",
                path=str(self._path),
                error=str(e),
            )
            return []

    def _write(self, splits: list[SavedSplit]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            payload = [split.model_dump(mode="json") for split in splits]
            tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as e:
            raise StorageError(f"Failed to write history to {self._path}: {e}") from e

    async def save_split(self, split: SavedSplit) -> bool:
        splits = self._read()
        splits.insert(0, split)
        self._write(splits[:self._max_entries])
        return True

    async def list_splits(self, limit: int = 50) -> list[SavedSplit]:
        return self._read()[:limit]

    async def get_split(self, split_id: UUID) -> Optional[SavedSplit]:
        return next((s for s in self._read() if s.id == split_id), None)

    async def delete_split(self, split_id: UUID) -> bool:
        splits = self._read()
        remaining = [s for s in splits if s.id != split_id]
        if len(remaining) == len(splits):
            raise NotFoundError(f"Split not found: {split_id}")
        self._write(remaining)
        return True
