"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from bookkeeping_gateway.domain.categories import ExpenseCategoryWorkspace
from bookkeeping_gateway.domain.workspace import PendingWorkspace
from bookkeeping_gateway.infrastructure.clients.supabase import SupabaseClient
from bookkeeping_gateway.infrastructure.notifications import NotificationCenter


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_workspace(request: Request) -> PendingWorkspace:
    """Provide the pending-review view owned by this process"""
    return request.app.state.workspace


def get_category_workspace(request: Request) -> ExpenseCategoryWorkspace:
    return request.app.state.categories


def get_supabase_client(request: Request) -> SupabaseClient:
    """Provide hosted database client instance"""
    return request.app.state.supabase


def get_notification_center(request: Request) -> NotificationCenter:
    return request.app.state.notifications
