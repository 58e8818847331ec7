"""User management API endpoints."""

from fastapi import APIRouter, Depends
import structlog

from src.api.dependencies import get_current_user, get_user_service
from src.models.auth import UpdateUserRequest
from src.models.response import ApiResponse
from src.models.user import PublicUser
from src.services.errors import PermissionDenied
from src.services.user_service import UserService, parse_user_id

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("")
async def list_users(
    current_user: PublicUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse:
    """List all users (no password hashes, avatars backfilled)."""
    users = await user_service.list_users()
    return ApiResponse(data=users)


@router.get("/stats")
async def user_stats(
    current_user: PublicUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse:
    """Summary counters for the users table."""
    stats = await user_service.stats()
    return ApiResponse(data=stats)


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    current_user: PublicUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse:
    """Fetch a single user.

    Raises:
        ValidationError (400): If the id is not numeric
        NotFoundError (404): If no user has that id
    """
    user = await user_service.get_user(parse_user_id(user_id))
    return ApiResponse(data=user)


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    request: UpdateUserRequest,
    current_user: PublicUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse:
    """Update a user's name and avatar. Email cannot be changed.

    Raises:
        ValidationError (400): If the id is not numeric or a name is missing
        NotFoundError (404): If no user has that id
    """
    updated = await user_service.update_user(
        parse_user_id(user_id),
        first_name=request.first_name,
        last_name=request.last_name,
        avatar=request.avatar,
    )

    logger.info(
        "user_profile_edited",
        editor_id=current_user.id,
        target_user_id=updated.id,
    )

    return ApiResponse(message="User updated", data=updated)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    current_user: PublicUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse:
    """Delete a user.

    Users cannot delete their own account.

    Raises:
        ValidationError (400): If the id is not numeric
        PermissionDenied (403): If the target is the signed-in user
        NotFoundError (404): If no user has that id
    """
    target_id = parse_user_id(user_id)
    if target_id == current_user.id:
        raise PermissionDenied("You cannot delete your own account")

    deleted, remaining = await user_service.delete_user(target_id)

    logger.info(
        "user_removed",
        editor_id=current_user.id,
        deleted_user_id=deleted.id,
    )

    return ApiResponse(
        message=f"Deleted user {deleted.first_name} {deleted.last_name}",
        data={"deletedUser": deleted, "remainingCount": remaining},
    )
