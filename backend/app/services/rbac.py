# backend/app/services/rbac.py
"""
Role-based access control as pure functions.

A user's effective permissions are the union of the role's permissions and
the user's direct permissions. Nothing here mutates its inputs.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from app.schemas.admin import AdminUser, Permission, PermissionSummary, RoleValidation, UserRole

VALID_RESOURCES = ("users", "profiles", "analytics", "system")
VALID_ACTIONS = ("read", "write", "delete", "manage")
VALID_ROLE_NAMES = ("admin", "moderator", "user")

DEFAULT_ROLES: Dict[str, UserRole] = {
    "admin": UserRole(
        id="role-admin",
        name="admin",
        permissions=[
            Permission(resource="users", actions=["read", "write", "delete", "manage"]),
            Permission(resource="profiles", actions=["read", "write", "delete", "manage"]),
            Permission(resource="analytics", actions=["read", "write", "manage"]),
            Permission(resource="system", actions=["read", "write", "manage"]),
        ],
    ),
    "moderator": UserRole(
        id="role-moderator",
        name="moderator",
        permissions=[
            Permission(resource="users", actions=["read", "write"]),
            Permission(resource="profiles", actions=["read", "write"]),
            Permission(resource="analytics", actions=["read"]),
        ],
    ),
    "user": UserRole(id="role-user", name="user", permissions=[]),
}


def get_default_role(role_name: str) -> UserRole:
    return DEFAULT_ROLES[role_name].model_copy(deep=True)


def merge_permissions(
    role_permissions: Iterable[Permission], direct_permissions: Iterable[Permission]
) -> List[Permission]:
    """Union per resource; resources and actions keep first-seen order, no duplicates."""
    merged: Dict[str, List[str]] = {}
    for permission in list(role_permissions) + list(direct_permissions):
        actions = merged.setdefault(permission.resource, [])
        for action in permission.actions:
            if action not in actions:
                actions.append(action)
    return [Permission(resource=resource, actions=actions) for resource, actions in merged.items()]


def get_user_permissions(user: Optional[AdminUser]) -> List[Permission]:
    if user is None:
        return []
    return merge_permissions(user.role.permissions, user.permissions)


def has_permission(user: Optional[AdminUser], resource: str, action: str) -> bool:
    if user is None or not user.is_active:
        return False
    return any(
        p.resource == resource and action in p.actions
        for p in list(user.permissions) + list(user.role.permissions)
    )


def has_any_permission(user: Optional[AdminUser], checks: Iterable[Tuple[str, str]]) -> bool:
    return any(has_permission(user, resource, action) for resource, action in checks)


def has_all_permissions(user: Optional[AdminUser], checks: Iterable[Tuple[str, str]]) -> bool:
    return all(has_permission(user, resource, action) for resource, action in checks)


def has_role(user: Optional[AdminUser], role_name: str) -> bool:
    return user is not None and user.role.name == role_name


def is_admin_or_moderator(user: Optional[AdminUser]) -> bool:
    return has_role(user, "admin") or has_role(user, "moderator")


def get_allowed_actions(user: Optional[AdminUser], resource: str) -> List[str]:
    if user is None or not user.is_active:
        return []
    for permission in get_user_permissions(user):
        if permission.resource == resource:
            return list(permission.actions)
    return []


def can_access_admin_panel(user: Optional[AdminUser]) -> bool:
    return is_admin_or_moderator(user) and user.is_active


def can_manage_users(user: Optional[AdminUser]) -> bool:
    return has_permission(user, "users", "manage") or (
        has_permission(user, "users", "write") and has_permission(user, "users", "delete")
    )


def can_view_analytics(user: Optional[AdminUser]) -> bool:
    return has_permission(user, "analytics", "read")


def can_modify_settings(user: Optional[AdminUser]) -> bool:
    return has_permission(user, "system", "write") or has_permission(user, "system", "manage")


def can_export_data(user: Optional[AdminUser]) -> bool:
    return has_any_permission(user, [("users", "read"), ("profiles", "read"), ("analytics", "read")])


def validate_role(role: UserRole) -> RoleValidation:
    errors = []
    if not role.id:
        errors.append("Role ID is required")
    if not role.name:
        errors.append("Role name is required")
    if role.name not in VALID_ROLE_NAMES:
        errors.append("Invalid role name. Must be admin, moderator, or user")

    for index, permission in enumerate(role.permissions):
        if not permission.resource:
            errors.append(f"Permission {index}: resource is required")
        if not permission.actions:
            errors.append(f"Permission {index}: actions must be a non-empty array")
        if permission.resource not in VALID_RESOURCES:
            errors.append(f"Permission {index}: invalid resource '{permission.resource}'")
        for action in permission.actions:
            if action not in VALID_ACTIONS:
                errors.append(f"Permission {index}: invalid action '{action}'")

    return RoleValidation(is_valid=not errors, errors=errors)


def includes_permissions(user_permissions: Iterable[Permission], required: Iterable[Permission]) -> bool:
    held = list(user_permissions)
    return all(
        any(p.resource == r.resource and all(a in p.actions for a in r.actions) for p in held)
        for r in required
    )


def permission_summary(user: Optional[AdminUser]) -> PermissionSummary:
    if user is None:
        return PermissionSummary(
            can_access_admin_panel=False,
            can_manage_users=False,
            can_view_analytics=False,
            can_modify_settings=False,
            can_export_data=False,
            role_level="none",
        )
    return PermissionSummary(
        can_access_admin_panel=can_access_admin_panel(user),
        can_manage_users=can_manage_users(user),
        can_view_analytics=can_view_analytics(user),
        can_modify_settings=can_modify_settings(user),
        can_export_data=can_export_data(user),
        role_level=user.role.name,
    )
