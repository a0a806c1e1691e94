"""
Current User Endpoints.

Profile of the authenticated user and the per-user watermark setting.
"""

from fastapi import APIRouter

from flyergen.core.database.repositories import UserRepository
from flyergen.core.models.io import UserRead, WatermarkUpdate
from flyergen.server.services.deps import CurrentUserDep, SessionDep

router = APIRouter()


@router.get(
    "/me",
    response_model=UserRead,
    summary="Get Current User",
    description="Retrieve the account of the authenticated user.",
    responses={401: {"description": "Not authenticated"}},
)
async def read_me(user: CurrentUserDep) -> UserRead:
    return UserRead.model_validate(user)


@router.patch(
    "/me/watermark",
    response_model=UserRead,
    summary="Toggle Watermark",
    description="Enable or disable the watermark on the user's future images.",
    responses={401: {"description": "Not authenticated"}},
)
async def update_watermark(payload: WatermarkUpdate, user: CurrentUserDep, session: SessionDep) -> UserRead:
    user.watermark_enabled = payload.watermark_enabled
    user = await UserRepository(session).update(user)
    return UserRead.model_validate(user)
