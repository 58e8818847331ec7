"""Unit tests for the JSON-file UserStore."""

import asyncio
import json
from datetime import datetime, timezone

import pytest

from src.models.user import StoredUser
from src.services.errors import ConflictError, StorageError
from src.services.user_store import UserStore


def _make_user(user_id=1, email="alice@example.com", first_name="Alice", last_name="Smith"):
    """Create a StoredUser for test setup."""
    now = datetime.now(timezone.utc)
    return StoredUser(
        id=user_id,
        email=email,
        first_name=first_name,
        last_name=last_name,
        password="$2b$04$hash",
        avatar=None,
        created_at=now,
        updated_at=now,
    )


def _appender(user):
    def build(users):
        return user.model_copy(update={"id": UserStore.next_id(users)})
    return build


class TestLoadAndSave:
    """Tests for load_all / save_all."""

    async def test_missing_file_loads_empty(self, store):
        assert await store.load_all() == []
        assert not store.path.exists()

    async def test_save_creates_parent_directory(self, store):
        await store.save_all([_make_user()])
        assert store.path.exists()

    async def test_file_is_plain_json_array(self, store):
        await store.save_all([_make_user(1), _make_user(2, email="bob@example.com")])
        data = json.loads(store.path.read_text(encoding="utf-8"))
        assert isinstance(data, list)
        assert [u["id"] for u in data] == [1, 2]
        assert data[0]["email"] == "alice@example.com"
        assert "password" in data[0]

    async def test_round_trip(self, store):
        user = _make_user()
        await store.save_all([user])
        loaded = await store.load_all()
        assert loaded == [user]

    async def test_malformed_json_raises_storage_error(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageError):
            await store.load_all()

    async def test_non_list_raises_storage_error(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text('{"users": []}', encoding="utf-8")
        with pytest.raises(StorageError):
            await store.load_all()

    async def test_invalid_record_raises_storage_error(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text('[{"id": "x"}]', encoding="utf-8")
        with pytest.raises(StorageError):
            await store.load_all()

    async def test_no_temp_files_left_behind(self, store):
        await store.save_all([_make_user()])
        await store.save_all([_make_user(), _make_user(2, email="b@example.com")])
        assert [p.name for p in store.path.parent.iterdir()] == ["users.json"]


class TestLookups:
    """Tests for find_by_email / find_by_id / next_id."""

    async def test_find_by_email_is_case_insensitive(self, store):
        await store.save_all([_make_user()])
        found = await store.find_by_email("  ALICE@Example.com ")
        assert found is not None
        assert found.id == 1

    async def test_find_by_email_missing(self, store):
        assert await store.find_by_email("nobody@example.com") is None

    async def test_find_by_id(self, store):
        await store.save_all([_make_user(1), _make_user(5, email="e@example.com")])
        assert (await store.find_by_id(5)).email == "e@example.com"
        assert await store.find_by_id(3) is None

    def test_next_id_empty(self):
        assert UserStore.next_id([]) == 1

    def test_next_id_is_max_plus_one(self):
        users = [_make_user(1), _make_user(9), _make_user(4)]
        assert UserStore.next_id(users) == 10


class TestMutations:
    """Tests for insert / update / delete."""

    async def test_insert_assigns_sequential_ids(self, store):
        first = await store.insert(_appender(_make_user()))
        second = await store.insert(_appender(_make_user(email="b@example.com")))
        assert (first.id, second.id) == (1, 2)
        assert len(await store.load_all()) == 2

    async def test_insert_aborted_by_builder(self, store):
        await store.save_all([_make_user()])

        def build(users):
            raise ConflictError()

        with pytest.raises(ConflictError):
            await store.insert(build)
        assert len(await store.load_all()) == 1

    async def test_concurrent_inserts_are_serialized(self, store):
        builders = [
            _appender(_make_user(email=f"user{i}@example.com")) for i in range(10)
        ]
        created = await asyncio.gather(*(store.insert(b) for b in builders))
        assert sorted(u.id for u in created) == list(range(1, 11))
        assert len(await store.load_all()) == 10

    async def test_update_changes_fields(self, store):
        await store.save_all([_make_user()])
        updated = await store.update(1, {"first_name": "Alicia"})
        assert updated.first_name == "Alicia"
        assert (await store.find_by_id(1)).first_name == "Alicia"

    async def test_update_missing_returns_none(self, store):
        await store.save_all([_make_user()])
        assert await store.update(2, {"first_name": "X"}) is None

    async def test_delete_returns_record_and_remaining(self, store):
        await store.save_all([_make_user(1), _make_user(2, email="b@example.com")])
        deleted, remaining = await store.delete(1)
        assert deleted.id == 1
        assert remaining == 1
        assert [u.id for u in await store.load_all()] == [2]

    async def test_delete_missing_returns_none(self, store):
        assert await store.delete(1) is None

    async def test_ids_not_reused_after_middle_delete(self, store):
        await store.save_all(
            [_make_user(i, email=f"u{i}@example.com") for i in (1, 2, 3)]
        )
        await store.delete(2)
        created = await store.insert(_appender(_make_user(email="new@example.com")))
        assert created.id == 4
