"""Admin user management endpoints."""

import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_caller
from libs.auth.models import CallerIdentity
from libs.db.session import get_async_db
from services.members_service.models import Role
from services.members_service.schemas import (
    AdminUserCreate,
    AdminUserResponse,
    AdminUserUpdate,
    AuditLogResponse,
    BulkUserRequest,
    BulkUserResponse,
    ProfileResponse,
    RoleUpdateRequest,
    SubscriptionUpdateRequest,
    UserCountResponse,
)
from services.members_service.services import audit_ops, user_admin_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin", tags=["admin-users"])


@router.get("/users", response_model=list[AdminUserResponse])
async def list_users(
    role: Optional[Role] = None,
    include_deleted: bool = False,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await user_admin_ops.list_users(
        db, caller, role=role, include_deleted=include_deleted
    )


@router.get("/users/count", response_model=UserCountResponse)
async def count_users(
    role: Optional[Role] = None,
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    count = await user_admin_ops.count_users(
        db, caller, role=role, start=start, end=end
    )
    return UserCountResponse(count=count)


@router.post(
    "/users", response_model=AdminUserResponse, status_code=status.HTTP_201_CREATED
)
async def create_user(
    body: AdminUserCreate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await user_admin_ops.create_user(db, caller, body)


@router.patch("/users/{profile_id}", response_model=AdminUserResponse)
async def update_user(
    profile_id: uuid.UUID,
    body: AdminUserUpdate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await user_admin_ops.update_user(
        db, caller, profile_id=profile_id, data=body
    )


@router.put("/users/{profile_id}/role", response_model=ProfileResponse)
async def update_user_role(
    profile_id: uuid.UUID,
    body: RoleUpdateRequest,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await user_admin_ops.update_user_role(
        db, caller, profile_id=profile_id, role=body.role
    )


@router.put("/users/{profile_id}/subscription", response_model=ProfileResponse)
async def update_subscription_status(
    profile_id: uuid.UUID,
    body: SubscriptionUpdateRequest,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await user_admin_ops.update_subscription_status(
        db,
        caller,
        profile_id=profile_id,
        subscription_status=body.subscription_status,
    )


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: uuid.UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    """Soft-delete a user; reversible with restore."""
    await user_admin_ops.delete_user(db, caller, user_id=user_id)


@router.post("/users/{user_id}/restore", status_code=status.HTTP_204_NO_CONTENT)
async def restore_user(
    user_id: uuid.UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    await user_admin_ops.restore_user(db, caller, user_id=user_id)


@router.post("/users/bulk-activate", response_model=BulkUserResponse)
async def bulk_activate_users(
    body: BulkUserRequest,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    updated = await user_admin_ops.bulk_activate_users(
        db, caller, user_ids=body.user_ids
    )
    return BulkUserResponse(updated=updated)


@router.post("/users/bulk-deactivate", response_model=BulkUserResponse)
async def bulk_deactivate_users(
    body: BulkUserRequest,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    updated = await user_admin_ops.bulk_deactivate_users(
        db, caller, user_ids=body.user_ids
    )
    return BulkUserResponse(updated=updated)


@router.get("/audit-logs", response_model=list[AuditLogResponse])
async def get_audit_logs(
    limit: Optional[int] = Query(None, ge=1, le=500),
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await audit_ops.get_audit_logs(db, caller, limit=limit)
