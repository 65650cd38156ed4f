# backend/app/api/api_v1/admin.py
from typing import Dict

from fastapi import APIRouter

from app.schemas import (
    PermissionCheckRequest,
    PermissionCheckResponse,
    PermissionSummary,
    SummaryRequest,
    UserRole,
)
from app.schemas.admin import RoleValidation
from app.services import rbac

router = APIRouter()


@router.get("/admin/roles", response_model=Dict[str, UserRole])
def list_default_roles():
    return rbac.DEFAULT_ROLES


@router.post("/admin/roles/validate", response_model=RoleValidation)
def validate_role(role: UserRole):
    return rbac.validate_role(role)


@router.post("/admin/permissions/summary", response_model=PermissionSummary)
def permission_summary(payload: SummaryRequest):
    return rbac.permission_summary(payload.user)


@router.post("/admin/permissions/check", response_model=PermissionCheckResponse)
def check_permission(payload: PermissionCheckRequest):
    return PermissionCheckResponse(
        allowed=rbac.has_permission(payload.user, payload.resource, payload.action),
        allowed_actions=rbac.get_allowed_actions(payload.user, payload.resource),
    )
