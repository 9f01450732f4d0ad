"""
Tests for split history storage backends.
"""

from uuid import uuid4

import pytest

from dietsplit.models.split import DietType, Dish, DishType, Person, SavedSplit
from dietsplit.services.storage import (
    InMemoryHistoryStorage,
    JsonFileHistoryStorage,
    NotFoundError,
    StorageError,
)


def _split(total=10.0):
    alice = Person(name="Alice", diet=DietType.VEGAN)
    dish = Dish(name="Salad", price=total, category=DishType.VEGAN, participant_ids={alice.id})
    return SavedSplit(
        subtotal=total,
        total=total,
        friend_count=1,
        dish_count=1,
        people=[alice],
        dishes=[dish],
        totals={alice.id: total},
    )


@pytest.fixture(params=["memory", "json"])
def storage(request, tmp_path):
    if request.param == "memory":
        return InMemoryHistoryStorage(max_entries=3)
    return JsonFileHistoryStorage(file_path=tmp_path / "history.json", max_entries=3)


class TestHistoryStorage:
    """Behaviour shared by every backend."""

    @pytest.mark.asyncio
    async def test_newest_first(self, storage):
        first, second = _split(10), _split(20)
        await storage.save_split(first)
        await storage.save_split(second)

        assert [s.id for s in await storage.list_splits()] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_max_entries_drops_oldest(self, storage):
        splits = [_split(float(i)) for i in range(5)]
        for split in splits:
            await storage.save_split(split)

        stored = await storage.list_splits()
        assert [s.id for s in stored] == [s.id for s in reversed(splits[2:])]

    @pytest.mark.asyncio
    async def test_limit(self, storage):
        for i in range(3):
            await storage.save_split(_split(float(i)))
        assert len(await storage.list_splits(limit=2)) == 2

    @pytest.mark.asyncio
    async def test_get_split(self, storage):
        split = _split()
        await storage.save_split(split)

        found = await storage.get_split(split.id)

        assert found == split
        assert await storage.get_split(uuid4()) is None

    @pytest.mark.asyncio
    async def test_delete_split(self, storage):
        split = _split()
        await storage.save_split(split)

        assert await storage.delete_split(split.id) is True
        assert await storage.list_splits() == []

        with pytest.raises(NotFoundError):
            await storage.delete_split(split.id)


class TestInMemoryHistoryStorage:

    @pytest.mark.asyncio
    async def test_stored_copies_are_isolated(self):
        storage = InMemoryHistoryStorage()
        split = _split()
        await storage.save_split(split)

        split.dishes[0].participant_ids.clear()

        stored = await storage.get_split(split.id)
        assert stored.dishes[0].participant_ids == {split.people[0].id}


class TestJsonFileHistoryStorage:

    @pytest.mark.asyncio
    async def test_round_trip_keeps_ids(self, tmp_path):
        path = tmp_path / "history.json"
        split = _split(12.5)
        await JsonFileHistoryStorage(file_path=path, max_entries=10).save_split(split)

        reloaded = await JsonFileHistoryStorage(file_path=path, max_entries=10).list_splits()

        assert len(reloaded) == 1
        person_id = split.people[0].id
        assert reloaded[0].dishes[0].participant_ids == {person_id}
        assert reloaded[0].totals == {person_id: 12.5}

    @pytest.mark.asyncio
    async def test_missing_file_is_empty_history(self, tmp_path):
        storage = JsonFileHistoryStorage(file_path=tmp_path / "nope.json", max_entries=10)
        assert await storage.list_splits() == []

    @pytest.mark.asyncio
    async def test_corrupt_file_is_empty_history(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text("{not json", encoding="utf-8")
        storage = JsonFileHistoryStorage(file_path=path, max_entries=10)

        assert await storage.list_splits() == []

        # Saving over a corrupt file starts a fresh history
        split = _split()
        await storage.save_split(split)
        assert [s.id for s in await storage.list_splits()] == [split.id]

    @pytest.mark.asyncio
    async def test_write_failure_is_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        storage = JsonFileHistoryStorage(file_path=blocker / "history.json", max_entries=10)

        with pytest.raises(StorageError):
            await storage.save_split(_split())

    def test_defaults_come_from_settings(self, monkeypatch, tmp_path):
        from dietsplit.config import get_settings

        monkeypatch.setenv("HISTORY_FILE_PATH", str(tmp_path / "from_env.json"))
        monkeypatch.setenv("HISTORY_MAX_ENTRIES", "7")
        get_settings.cache_clear()

        storage = JsonFileHistoryStorage()

        assert storage.path == tmp_path / "from_env.json"
        assert storage._max_entries == 7
