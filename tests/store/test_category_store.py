import json

import pytest

from DayFlow.errors import StorageUnavailable, ValidationError
from DayFlow.models import DEFAULT_ICON
from DayFlow.store.activities import ActivityLogStore
from DayFlow.store.categories import CATEGORIES_STORAGE_KEY, DEFAULT_CATEGORIES, CategoryStore

DAY = "2024-06-05"
OTHER_DAY = "2024-05-01"


def fixed_clock():
    return 1700000000.0


@pytest.fixture
def activities(kv):
    return ActivityLogStore(kv)


@pytest.fixture
def categories(kv, activities):
    return CategoryStore(kv, activities, clock=fixed_clock)


def test_defaults_are_seeded_and_persisted(categories, kv):
    names = [c.name for c in categories.list_categories()]
    assert names == ["Work", "Sleep", "Leisure", "Exercise", "Chores", "Learning", "Eating", "Other"]
    stored = json.loads(kv.get(CATEGORIES_STORAGE_KEY))
    assert [c["id"] for c in stored] == [c.id for c in DEFAULT_CATEGORIES]


def test_saved_empty_list_is_not_reseeded(kv, activities):
    kv.put(CATEGORIES_STORAGE_KEY, "[]")
    assert CategoryStore(kv, activities).list_categories() == []


def test_add_category_trims_and_appends(categories):
    added = categories.add_category("  Deep Work  ", "Pencil")
    assert added.name == "Deep Work"
    assert added.icon == "Pencil"
    assert added.id == "1700000000000"
    assert categories.list_categories()[-1] == added


def test_add_category_defaults_icon(categories):
    assert categories.add_category("Reading").icon == DEFAULT_ICON


def test_ids_are_unique_within_the_same_millisecond(categories):
    first = categories.add_category("Reading")
    second = categories.add_category("Writing")
    assert first.id != second.id
    assert second.id == "1700000000001"


@pytest.mark.parametrize("name", ["", "   ", "work", "SLEEP", " Leisure "])
def test_empty_or_duplicate_names_are_rejected(categories, name):
    before = categories.list_categories()
    with pytest.raises(ValidationError):
        categories.add_category(name)
    assert categories.list_categories() == before


def test_added_category_persists(categories, kv, activities):
    categories.add_category("Reading")
    reloaded = CategoryStore(kv, activities)
    assert "Reading" in [c.name for c in reloaded.list_categories()]


def test_delete_cascades_to_loaded_and_unloaded_days(kv):
    # A previous session saved OTHER_DAY; this session never loads it before the delete
    ActivityLogStore(kv).set_field(OTHER_DAY, 2, "categoryId", "work")

    activities = ActivityLogStore(kv)
    categories = CategoryStore(kv, activities)
    activities.set_field(DAY, 9, "categoryId", "work")
    activities.set_field(DAY, 10, "categoryId", "sleep")

    assert categories.delete_category("work") is True

    assert categories.get_category("work") is None
    assert activities.get_day(DAY)[9].category_id is None
    assert activities.get_day(DAY)[10].category_id == "sleep"
    assert activities.get_day(OTHER_DAY)[2].category_id is None

    fresh = ActivityLogStore(kv)
    assert fresh.get_day(DAY)[9].category_id is None
    assert fresh.get_day(OTHER_DAY)[2].category_id is None
    assert "work" not in [c.id for c in CategoryStore(kv, fresh).list_categories()]


def test_delete_unknown_id_is_a_noop(categories, activities):
    activities.set_field(DAY, 9, "categoryId", "work")
    before = categories.list_categories()

    assert categories.delete_category("does-not-exist") is False
    assert categories.list_categories() == before
    assert activities.get_day(DAY)[9].category_id == "work"


def test_failed_delete_rolls_back_storage_but_updates_memory(kv, activities, categories, monkeypatch):
    activities.set_field(DAY, 9, "categoryId", "work")
    categories.list_categories()

    def broken_save(_categories):
        raise StorageUnavailable("write failed")

    monkeypatch.setattr(categories, "_save", broken_save)
    with pytest.raises(StorageUnavailable):
        categories.delete_category("work")

    assert categories.get_category("work") is None
    assert activities.get_day(DAY)[9].category_id is None

    fresh = ActivityLogStore(kv)
    assert fresh.get_day(DAY)[9].category_id == "work"
    assert CategoryStore(kv, fresh).get_category("work") is not None


def test_unreadable_saved_categories_fall_back_to_defaults(kv, activities):
    kv.put(CATEGORIES_STORAGE_KEY, '[{"id": 1}]')
    names = [c.name for c in CategoryStore(kv, activities).list_categories()]
    assert names[0] == "Work"
    assert kv.get(CATEGORIES_STORAGE_KEY) == '[{"id": 1}]'


def test_delete_survives_a_corrupt_saved_day(kv, activities, categories):
    kv.put("dayflow_activities_2024-01-01", json.dumps([{"hour": 1, "categoryId": "work", "notes15Min": 5}]))
    kv.put("dayflow_activities_2024-01-02", "{not json")
    activities.set_field(DAY, 9, "categoryId", "work")

    assert categories.delete_category("work") is True
    assert activities.get_day(DAY)[9].category_id is None
    assert kv.get("dayflow_activities_2024-01-02") == "{not json"


def test_delete_only_keeps_changed_days_in_memory(kv):
    writer = ActivityLogStore(kv)
    writer.set_field(OTHER_DAY, 2, "categoryId", "work")
    writer.set_field("2024-05-02", 3, "categoryId", "sleep")

    activities = ActivityLogStore(kv)
    CategoryStore(kv, activities).delete_category("work")

    assert set(activities._days) == {OTHER_DAY}
    assert activities.get_day("2024-05-02")[3].category_id == "sleep"
