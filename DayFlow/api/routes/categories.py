from fastapi import APIRouter, Depends, status

from DayFlow.api import schemas
from DayFlow.api.deps import get_tracker
from DayFlow.tracker import DayTracker

router = APIRouter()


@router.get("", response_model=list[schemas.Category])
async def read_categories(tracker: DayTracker = Depends(get_tracker)):
    return tracker.categories.list_categories()


@router.post("", response_model=schemas.Category, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_in: schemas.CategoryCreate,
    tracker: DayTracker = Depends(get_tracker),
):
    return tracker.categories.add_category(category_in.name, category_in.icon)


@router.delete("/{category_id}", response_model=schemas.CategoryDeleted)
async def delete_category(
    category_id: str,
    tracker: DayTracker = Depends(get_tracker),
):
    deleted = tracker.categories.delete_category(category_id)
    return {"id": category_id, "deleted": deleted}
