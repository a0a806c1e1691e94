"""
Admin User Management Endpoints.

Lists, updates and deletes accounts. Role assignment and deletion are
reserved to HERO users, and a role above the caller's own can never be
granted. Credit management is open to ADMIN and HERO.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from flyergen.core.database.entities.users import UserRole
from flyergen.core.database.repositories import UserRepository
from flyergen.core.logging_config import get_logger
from flyergen.core.models.io import AdminUserUpdate, UserList, UserRead
from flyergen.server.services.deps import AdminUserDep, SessionDep
from flyergen.server.services.permissions import can_access, can_admin, can_hero, is_role_higher_or_equal

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=UserList,
    summary="List Users",
    description="List user accounts, newest first, filtered by role and a name or e-mail search.",
    responses={403: {"description": "Admin access required"}},
)
async def list_users(
    admin: AdminUserDep,
    session: SessionDep,
    search: Optional[str] = Query(default=None, description="Case-insensitive match on name or e-mail"),
    role: Optional[UserRole] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> UserList:
    if not can_access(admin.role, "users:view"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    users, total = await UserRepository(session).search(search=search, role=role, limit=limit, offset=offset)
    return UserList(
        items=[UserRead.model_validate(user) for user in users], total=total, limit=limit, offset=offset
    )


@router.patch(
    "/{user_id}",
    response_model=UserRead,
    summary="Update User",
    description="Change a user's role and/or credit balance.",
    responses={
        400: {"description": "Invalid credits value"},
        403: {"description": "Insufficient permissions"},
        404: {"description": "Target user not found"},
    },
)
async def update_user(user_id: str, payload: AdminUserUpdate, admin: AdminUserDep, session: SessionDep) -> UserRead:
    """
    Update a user.

    - **role**: HERO callers only, and never above the caller's own role.
    - **credits**: ADMIN or HERO callers, non-negative.
    """
    can_manage_roles = can_hero(admin.role, "roles:assign")
    can_manage_credits = can_admin(admin.role, "credits:manage")
    if not can_manage_roles and not can_manage_credits:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="User does not have permission to manage users"
        )

    if payload.role is not None:
        if not can_manage_roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions to manage roles")
        if not is_role_higher_or_equal(admin.role, payload.role):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot assign role higher than your own")

    if payload.credits is not None:
        if not can_manage_credits:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions to manage credits"
            )
        if payload.credits < 0:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Credits must be a non-negative number")

    users = UserRepository(session)
    target = await users.get_by_id(user_id)
    if target is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Target user not found")

    if payload.role is not None:
        target.role = payload.role
    if payload.credits is not None:
        target.credits = payload.credits
    target = await users.update(target)
    logger.info(f"Admin {admin.id} updated user {target.id}: role={target.role.value}, credits={target.credits}")
    return UserRead.model_validate(target)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete User",
    description="Delete an account and its images. HERO only.",
    responses={
        400: {"description": "Cannot delete your own account"},
        403: {"description": "Insufficient permissions"},
        404: {"description": "Target user not found"},
    },
)
async def delete_user(user_id: str, admin: AdminUserDep, session: SessionDep) -> None:
    if not can_hero(admin.role, "users:delete"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions to delete users")
    if user_id == admin.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete your own account")

    users = UserRepository(session)
    target = await users.get_by_id(user_id)
    if target is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Target user not found")

    await users.delete_account(target)
    logger.info(f"Hero {admin.id} deleted user {user_id}")
