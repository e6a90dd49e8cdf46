"""Unit tests for RecordStore.list pagination."""

import pytest

from task_records.store import RecordStore


@pytest.fixture()
def store_25():
    store = RecordStore()
    for i in range(25):
        store.create(f"Paginated Todo {i}", "Description")
    return store


def test_page_sizes(store_25):
    assert len(store_25.list(1, 10)) == 10
    assert len(store_25.list(2, 10)) == 10
    assert len(store_25.list(3, 10)) == 5
    assert store_25.list(4, 10) == []


def test_pages_cover_all_records_in_creation_order(store_25):
    names = [r.name for page in (1, 2, 3) for r in store_25.list(page, 10)]
    assert names == [f"Paginated Todo {i}" for i in range(25)]


def test_default_page_size_is_ten(store_25):
    assert store_25.list(1) == store_25.list(1, 10)
    assert len(store_25.list(3)) == 5


def test_page_zero_behaves_as_page_one(store_25):
    assert store_25.list(0, 7) == store_25.list(1, 7)
    assert store_25.list(0) == store_25.list(1)


def test_page_size_zero_is_empty(store_25):
    assert store_25.list(1, 0) == []
    assert store_25.list(5, 0) == []


def test_far_out_of_range_page_is_empty(store_25):
    assert store_25.list(10_000, 10) == []


def test_empty_store():
    assert RecordStore().list(1) == []


def test_deleted_records_disappear_from_pages(store_25):
    store_25.delete(0)
    store_25.delete(10)
    names = [r.name for page in (1, 2, 3) for r in store_25.list(page, 10)]
    assert len(names) == 23
    assert "Paginated Todo 0" not in names
    assert "Paginated Todo 10" not in names
    assert names[0] == "Paginated Todo 1"
    assert len(store_25.list(3, 10)) == 3


def test_list_skips_orphaned_ids(store_25, caplog):
    del store_25._table[3]
    page = store_25.list(1, 10)
    assert len(page) == 9
    assert "Paginated Todo 3" not in [r.name for r in page]
    assert any(r.getMessage() == "index_inconsistency" for r in caplog.records)


def test_list_returns_copies(store_25):
    store_25.list(1, 1)[0].name = "mutated"
    assert store_25.list(1, 1)[0].name == "Paginated Todo 0"


def test_scenario():
    store = RecordStore()
    assert store.create("A", "a") == 0
    assert store.create("B", "b") == 1

    first = store.list(1, 1)
    assert [r.to_dict() for r in first] == [
        {"name": "A", "description": "a", "is_completed": False}
    ]

    assert store.update(1, is_completed=True) is True
    assert store.get(1).to_dict() == {"name": "B", "description": "b", "is_completed": True}

    assert store.delete(0) is True
    assert [r.to_dict() for r in store.list(1, 10)] == [
        {"name": "B", "description": "b", "is_completed": True}
    ]
