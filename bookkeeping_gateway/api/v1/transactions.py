"""Reviewed transactions and reviewer notifications"""

from fastapi import APIRouter, Depends, Query

from bookkeeping_gateway.api.v1.schemas import (
    NotificationListResponse,
    NotificationSchema,
    TransactionListResponse,
    TransactionSchema,
)
from bookkeeping_gateway.api.dependencies import get_notification_center, get_workspace
from bookkeeping_gateway.domain.workspace import PendingWorkspace
from bookkeeping_gateway.infrastructure.notifications import NotificationCenter

router = APIRouter()


@router.get("/transactions/approved", response_model=TransactionListResponse)
async def get_approved(workspace: PendingWorkspace = Depends(get_workspace)):
    return TransactionListResponse(
        transactions=[TransactionSchema.from_domain(t) for t in workspace.stores.approved.get()]
    )


@router.get("/transactions/rejected", response_model=TransactionListResponse)
async def get_rejected(workspace: PendingWorkspace = Depends(get_workspace)):
    return TransactionListResponse(
        transactions=[TransactionSchema.from_domain(t) for t in workspace.stores.rejected.get()]
    )


@router.get("/notifications", response_model=NotificationListResponse)
async def get_notifications(
    limit: int = Query(20, ge=1, le=100),
    notifications: NotificationCenter = Depends(get_notification_center),
):
    """Recent toasts, newest first"""
    return NotificationListResponse(
        notifications=[NotificationSchema.from_domain(n) for n in notifications.recent(limit)]
    )
