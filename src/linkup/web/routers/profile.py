from fastapi import APIRouter

from linkup.core.modules.user.models import ProfileUpdate, ProfileView
from linkup.web.deps import AppDep, AuthContextDep
from linkup.web.openapi import ERROR_RESPONSES
from linkup.web.responses import SuccessResponse, success

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get(
    "",
    summary="Get current user profile",
    description="Get the profile of the currently authenticated user.",
    operation_id="getProfile",
    responses=ERROR_RESPONSES,
)
async def get_profile(app: AppDep, ctx: AuthContextDep) -> SuccessResponse[ProfileView]:
    profile = await app.get_profile(ctx)
    return success(profile, "Profile retrieved successfully")


@router.put(
    "",
    summary="Update current user profile",
    description="Partially update bio, mobile number, gender, cover image and profile image URL. Omitted fields are kept.",
    operation_id="updateProfile",
    responses=ERROR_RESPONSES,
)
async def update_profile(update: ProfileUpdate, app: AppDep, ctx: AuthContextDep) -> SuccessResponse[ProfileView]:
    profile = await app.update_profile(ctx, update)
    return success(profile, "Profile updated successfully")
