from DayFlow.store.activities import ActivityLogStore
from DayFlow.store.categories import CategoryStore

__all__ = ["ActivityLogStore", "CategoryStore"]
