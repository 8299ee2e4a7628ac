from fastapi import APIRouter, Depends

from app.models.user import User
from app.schemas.list_entry import (
    ListEntryAdd,
    ListEntryRemove,
    ListEntryResponse,
    ListEntryRemoveResponse,
    UserListsResponse,
)
from app.services.list_service import ListService
from app.utils.dependencies import get_current_user, get_list_service

router = APIRouter(prefix="/lists", tags=["Lists"])


def get_user_id(user: User) -> int:
    """Helper to extract user_id as int for type safety"""
    return int(user.id)  # type: ignore


@router.get("", response_model=UserListsResponse)
def get_lists(
    current_user: User = Depends(get_current_user),
    service: ListService = Depends(get_list_service)
):
    """
    Get the user's titles grouped by list

    Returns `watching`, `will-watch` and `already-watched`, newest first.
    """
    return service.list_entries_for_user(get_user_id(current_user))


@router.post("", response_model=ListEntryResponse)
def add_or_move_entry(
    entry_data: ListEntryAdd,
    current_user: User = Depends(get_current_user),
    service: ListService = Depends(get_list_service)
):
    """
    Add a title to a list

    - **movieId**: catalog id (required)
    - **title**: title text (required)
    - **category**: Watching, Will Watch or Already Watched (required)
    - **source**: tmdb or youtube (default tmdb)

    If the title is already in one of the user's lists it is moved to this one.
    """
    return service.add_or_move_entry(get_user_id(current_user), entry_data)


@router.delete("", response_model=ListEntryRemoveResponse)
def remove_entry(
    remove_data: ListEntryRemove,
    current_user: User = Depends(get_current_user),
    service: ListService = Depends(get_list_service)
):
    """Remove a title from one list"""
    count = service.remove_entry(get_user_id(current_user), remove_data.movie_id, remove_data.category)
    return {"message": "Movie removed from list", "deleted": {"count": count}}


@router.get("/{movie_id}", response_model=ListEntryResponse)
def get_entry(
    movie_id: str,
    current_user: User = Depends(get_current_user),
    service: ListService = Depends(get_list_service)
):
    """Which list (if any) a title is in"""
    return service.get_entry(get_user_id(current_user), movie_id)
