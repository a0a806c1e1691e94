"""
Role-based access control.

Each feature maps every role to a ``PermissionLevel``. A role may use a
feature at a given level when its level for that feature is at least the
required one. Roles are also ranked (HERO > ADMIN > USER) so callers can
stop users from granting roles above their own.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Dict, List, Union

from flyergen.core.database.entities.users import UserRole

logger = logging.getLogger(__name__)

RoleLike = Union[UserRole, str]


class PermissionLevel(IntEnum):
    NONE = 0
    READ = 1
    WRITE = 2
    ADMIN = 3
    HERO = 4


def _levels(hero: PermissionLevel, admin: PermissionLevel, user: PermissionLevel) -> Dict[UserRole, PermissionLevel]:
    return {UserRole.HERO: hero, UserRole.ADMIN: admin, UserRole.USER: user}


_R, _W, _A, _H, _N = (
    PermissionLevel.READ,
    PermissionLevel.WRITE,
    PermissionLevel.ADMIN,
    PermissionLevel.HERO,
    PermissionLevel.NONE,
)

FEATURE_PERMISSIONS: Dict[str, Dict[UserRole, PermissionLevel]] = {
    # Dashboard & analytics
    "dashboard:view": _levels(_R, _R, _R),
    "dashboard:admin": _levels(_A, _A, _N),
    "analytics:view": _levels(_R, _R, _N),
    "analytics:manage": _levels(_A, _A, _N),
    # User management
    "users:view": _levels(_R, _R, _N),
    "users:manage": _levels(_A, _A, _N),
    "users:delete": _levels(_H, _N, _N),
    # System configuration
    "system:prompts:view": _levels(_R, _R, _N),
    "system:prompts:manage": _levels(_A, _A, _N),
    "system:settings:view": _levels(_R, _R, _N),
    "system:settings:manage": _levels(_H, _N, _N),
    # Images
    "images:view": _levels(_R, _R, _R),
    "images:generate": _levels(_W, _W, _W),
    "images:delete": _levels(_A, _A, _N),
    "images:moderate": _levels(_H, _A, _N),
    # Billing & credits
    "billing:view": _levels(_R, _R, _R),
    "billing:manage": _levels(_H, _A, _N),
    "credits:view": _levels(_R, _R, _R),
    "credits:manage": _levels(_H, _A, _N),
    # Contact & support
    "contact:view": _levels(_R, _R, _N),
    "contact:manage": _levels(_A, _A, _N),
    # Roles
    "roles:view": _levels(_R, _R, _N),
    "roles:assign": _levels(_H, _N, _N),
    "roles:manage": _levels(_H, _N, _N),
}

ROLE_HIERARCHY: Dict[UserRole, int] = {
    UserRole.HERO: 4,
    UserRole.ADMIN: 3,
    UserRole.USER: 1,
}

ROLE_DISPLAY_NAMES: Dict[UserRole, str] = {
    UserRole.HERO: "Hero (Super Admin)",
    UserRole.ADMIN: "Admin",
    UserRole.USER: "User",
}

ROLE_DESCRIPTIONS: Dict[UserRole, str] = {
    UserRole.HERO: "Super administrator with full system access including role management and system settings",
    UserRole.ADMIN: "Administrator with access to most system features and user management",
    UserRole.USER: "Regular user with access to basic features and content creation",
}


def has_permission(role: RoleLike, feature: str, required: PermissionLevel = PermissionLevel.READ) -> bool:
    """Whether ``role`` holds at least ``required`` on ``feature``; unknown features are denied."""
    levels = FEATURE_PERMISSIONS.get(feature)
    if levels is None:
        logger.warning(f"Unknown feature permission requested: {feature}")
        return False
    return levels.get(UserRole(role), PermissionLevel.NONE) >= required


def can_access(role: RoleLike, feature: str) -> bool:
    return has_permission(role, feature, PermissionLevel.READ)


def can_write(role: RoleLike, feature: str) -> bool:
    return has_permission(role, feature, PermissionLevel.WRITE)


def can_admin(role: RoleLike, feature: str) -> bool:
    return has_permission(role, feature, PermissionLevel.ADMIN)


def can_hero(role: RoleLike, feature: str) -> bool:
    return has_permission(role, feature, PermissionLevel.HERO)


def is_role_higher_or_equal(role: RoleLike, required: RoleLike) -> bool:
    return ROLE_HIERARCHY[UserRole(role)] >= ROLE_HIERARCHY[UserRole(required)]


def is_admin_role(role: RoleLike) -> bool:
    return UserRole(role) in (UserRole.ADMIN, UserRole.HERO)


def get_role_display_name(role: RoleLike) -> str:
    return ROLE_DISPLAY_NAMES.get(UserRole(role), str(role))


def get_role_description(role: RoleLike) -> str:
    return ROLE_DESCRIPTIONS.get(UserRole(role), "Unknown role")


def get_role_features(role: RoleLike) -> List[str]:
    """Features the role can at least read."""
    return [feature for feature in FEATURE_PERMISSIONS if can_access(role, feature)]


def get_role_manageable_features(role: RoleLike) -> List[str]:
    """Features the role can administer."""
    return [feature for feature in FEATURE_PERMISSIONS if can_admin(role, feature)]
