from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional

from app.models.user import User
from app.schemas.comment import CommentCreate, CommentResponse
from app.services.comment_service import CommentService
from app.utils.dependencies import get_current_user, get_comment_service

router = APIRouter(prefix="/comments", tags=["Comments"])


@router.get("", response_model=List[CommentResponse])
def get_comments(
    title_id: Optional[str] = Query(None, alias="titleId", description="Catalog id of the title"),
    service: CommentService = Depends(get_comment_service)
):
    """
    Get comments on a title, newest first

    Public endpoint - no authentication required.
    """
    return service.list_comments(title_id)


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def add_comment(
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service)
):
    """
    Post a comment on a title

    - **titleId**: catalog id (required)
    - **text**: comment body (required)
    - **authorName**: name to show instead of the username (optional)
    """
    return service.add_comment(
        current_user,
        comment_data.title_id,
        comment_data.text,
        comment_data.author_name
    )
