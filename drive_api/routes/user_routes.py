"""Current-user API routes."""

from fastapi import APIRouter, Depends

from drive_api.auth import get_current_user
from drive_api.dependencies import get_auth_service, get_quota_service
from drive_api.schemas.user import UserResponse
from drive_api.services.auth_service import AuthService
from drive_api.services.quota_service import QuotaService

router = APIRouter(prefix="/user", tags=["User"])


@router.get("", response_model=UserResponse)
async def get_user(
    current_user: str = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
    quota_service: QuotaService = Depends(get_quota_service),
):
    """
    Return the authenticated user's profile and storage usage.
    """
    user = auth_service.get_user(current_user)
    usage = quota_service.usage_summary(current_user)
    return UserResponse(
        user_id=user.user_id,
        username=user.username,
        created_at=user.created_at,
        storage_used=usage.storage_used,
        storage_total=usage.storage_total,
        storage_percentage=usage.storage_percentage,
    )
