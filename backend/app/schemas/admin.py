# backend/app/schemas/admin.py
from typing import List, Literal, Optional

from pydantic import Field

from app.schemas.base import CamelModel

RoleName = Literal["admin", "moderator", "user"]


class Permission(CamelModel):
    resource: str
    actions: List[str] = Field(default_factory=list)


class UserRole(CamelModel):
    id: str
    name: str
    permissions: List[Permission] = Field(default_factory=list)


class AdminUser(CamelModel):
    id: str
    email: str = ""
    name: str = ""
    role: UserRole
    is_active: bool = True
    permissions: List[Permission] = Field(default_factory=list)


class PermissionSummary(CamelModel):
    can_access_admin_panel: bool
    can_manage_users: bool
    can_view_analytics: bool
    can_modify_settings: bool
    can_export_data: bool
    role_level: str


class PermissionCheckRequest(CamelModel):
    user: AdminUser
    resource: str
    action: str


class PermissionCheckResponse(CamelModel):
    allowed: bool
    allowed_actions: List[str]


class RoleValidation(CamelModel):
    is_valid: bool
    errors: List[str] = Field(default_factory=list)


class SummaryRequest(CamelModel):
    user: Optional[AdminUser] = None
