from __future__ import annotations

import json
import logging
import time
from typing import Callable, List, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from DayFlow.database import KeyValueStore
from DayFlow.errors import ValidationError
from DayFlow.models import DEFAULT_ICON, Category
from DayFlow.store.activities import ActivityLogStore

log = logging.getLogger(__name__)

CATEGORIES_STORAGE_KEY = "dayflow_categories"

DEFAULT_CATEGORIES: List[Category] = [
    Category(id="work", name="Work", icon="Briefcase"),
    Category(id="sleep", name="Sleep", icon="BedDouble"),
    Category(id="leisure", name="Leisure", icon="Gamepad2"),
    Category(id="exercise", name="Exercise", icon="Dumbbell"),
    Category(id="chores", name="Chores", icon="Home"),
    Category(id="learning", name="Learning", icon="BookOpen"),
    Category(id="eating", name="Eating", icon="Utensils"),
    Category(id="other", name="Other", icon="CircleDot"),
]

_CATEGORY_LIST = TypeAdapter(List[Category])


class CategoryStore:
    """
    The global, insertion-ordered category list. Categories are not day-scoped.
    Deleting one clears every activity record that points at it.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        activities: Optional[ActivityLogStore] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.kv = kv
        self.activities = activities
        self._clock = clock
        self._categories: Optional[List[Category]] = None

    def _loaded(self) -> List[Category]:
        if self._categories is not None:
            return self._categories

        raw = self.kv.get(CATEGORIES_STORAGE_KEY)
        if raw is None:
            log.info("No saved categories. Seeding the default set.")
            self._categories = [c.model_copy() for c in DEFAULT_CATEGORIES]
            self._save(self._categories)
            return self._categories

        try:
            self._categories = _CATEGORY_LIST.validate_json(raw)
        except PydanticValidationError as e:
            log.error(f"Saved categories are unreadable ({e.error_count()} error(s)). Using defaults for this session.")
            self._categories = [c.model_copy() for c in DEFAULT_CATEGORIES]
        return self._categories

    def _save(self, categories: List[Category]) -> None:
        self.kv.put(CATEGORIES_STORAGE_KEY, json.dumps([c.model_dump() for c in categories]))

    def _new_id(self, taken: set) -> str:
        candidate = int(self._clock() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    # --------------- public API -------------------------------------------
    def list_categories(self) -> List[Category]:
        return [c.model_copy() for c in self._loaded()]

    def get_category(self, category_id: str) -> Optional[Category]:
        for category in self._loaded():
            if category.id == category_id:
                return category.model_copy()
        return None

    def add_category(self, name: str, icon: Optional[str] = None) -> Category:
        trimmed = (name or "").strip()
        if not trimmed:
            raise ValidationError("Category name cannot be empty.")
        categories = self._loaded()
        if any(c.name.lower() == trimmed.lower() for c in categories):
            raise ValidationError(f"Category name '{trimmed}' already exists.")

        category = Category(
            id=self._new_id({c.id for c in categories}),
            name=trimmed,
            icon=icon or DEFAULT_ICON,
        )
        updated = categories + [category]
        self._categories = updated
        self._save(updated)
        log.info(f"Category '{category.name}' added with id {category.id}")
        return category.model_copy()

    def delete_category(self, category_id: str) -> bool:
        """
        Remove a category and clear every reference to it, in memory and in all
        saved days, in one storage transaction. Unknown ids are a no-op.
        Returns True when something was deleted.
        """
        categories = self._loaded()
        if not any(c.id == category_id for c in categories):
            log.debug(f"delete_category: no category with id {category_id}")
            return False

        remaining = [c for c in categories if c.id != category_id]
        plan = self.activities.plan_category_clear(category_id) if self.activities else {}
        try:
            with self.kv.transaction():
                if self.activities:
                    self.activities.save_days(plan)
                self._save(remaining)
        finally:
            # Memory stays consistent even when the write was rolled back
            if self.activities:
                self.activities.cache_days(plan)
            self._categories = remaining

        log.info(f"Category {category_id} deleted; cleared references in {len(plan)} day(s)")
        return True
