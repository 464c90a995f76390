"""/v1/expense-categories - category table and bulk delete"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from bookkeeping_gateway.api.v1.schemas import (
    CategoryDeleteResponse,
    CategoryFilterRequest,
    CategoryPageResponse,
    ExpenseCategorySchema,
    NotificationSchema,
    PageRequest,
    SelectionRequest,
)
from bookkeeping_gateway.api.dependencies import get_category_workspace, get_request_id, get_supabase_client
from bookkeeping_gateway.infrastructure.clients.supabase import SupabaseClient
from bookkeeping_gateway.infrastructure.observability.metrics import remote_fetch_failures_counter
from bookkeeping_gateway.domain.categories import ExpenseCategoryWorkspace
from bookkeeping_gateway.domain.exceptions import (
    DeletionInProgressError,
    InvalidTransactionDataError,
    RemoteUpdateError,
)

router = APIRouter()


def _page(workspace: ExpenseCategoryWorkspace) -> CategoryPageResponse:
    tracker = workspace.tracker
    return CategoryPageResponse(
        rows=[ExpenseCategorySchema.from_domain(c) for c in tracker.rows()],
        selected_ids=[c.id for c in tracker.selected()],
        page_index=tracker.state.page_index,
        page_size=tracker.state.page_size,
        page_count=tracker.page_count(),
        total=len(tracker.filtered_rows()),
        busy=workspace.busy,
    )


@router.get("/expense-categories", response_model=CategoryPageResponse)
async def get_categories(workspace: ExpenseCategoryWorkspace = Depends(get_category_workspace)):
    return _page(workspace)


@router.post("/expense-categories/refresh", response_model=CategoryPageResponse)
async def refresh_categories(
    request: Request,
    workspace: ExpenseCategoryWorkspace = Depends(get_category_workspace),
    supabase: SupabaseClient = Depends(get_supabase_client),
):
    """Reload the category table from the hosted database"""
    try:
        refreshed = await workspace.refresh(supabase.fetch_expense_categories)
    except DeletionInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (RemoteUpdateError, InvalidTransactionDataError) as e:
        remote_fetch_failures_counter.inc()
        logging.error(f"Hosted database error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Hosted database unavailable")

    if not refreshed:
        raise HTTPException(status_code=409, detail="Categories changed during refresh, retry")
    return _page(workspace)


@router.post("/expense-categories/selection", response_model=CategoryPageResponse)
async def update_category_selection(
    body: SelectionRequest, workspace: ExpenseCategoryWorkspace = Depends(get_category_workspace)
):
    tracker = workspace.tracker
    if body.all_page_rows:
        tracker.toggle_all_page_rows(body.value)
    for category_id in body.ids:
        tracker.toggle(category_id, body.value)
    return _page(workspace)


@router.post("/expense-categories/page", response_model=CategoryPageResponse)
async def change_category_page(
    body: PageRequest, workspace: ExpenseCategoryWorkspace = Depends(get_category_workspace)
):
    if body.page_size is not None:
        workspace.tracker.set_page_size(body.page_size)
    workspace.tracker.set_page(body.page_index)
    return _page(workspace)


@router.post("/expense-categories/filter", response_model=CategoryPageResponse)
async def change_category_filter(
    body: CategoryFilterRequest, workspace: ExpenseCategoryWorkspace = Depends(get_category_workspace)
):
    workspace.tracker.set_filter(body.text)
    workspace.tracker.set_sorting(body.sort_column, body.sort_descending)
    return _page(workspace)


@router.post("/expense-categories/delete", response_model=CategoryDeleteResponse)
async def delete_selected_categories(
    request: Request, workspace: ExpenseCategoryWorkspace = Depends(get_category_workspace)
):
    """
    Delete every selected category.

    Rows leave the table only when the hosted database deleted all of them.
    """
    try:
        outcome = await workspace.delete_selected()
    except DeletionInProgressError as e:
        logging.warning(f"Delete rejected: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=409, detail=str(e))

    if outcome is None:
        return CategoryDeleteResponse(deleted_ids=[], failed_ids=[])

    return CategoryDeleteResponse(
        deleted_ids=[c.id for c in outcome.deleted],
        failed_ids=[r.item.id for r in outcome.failed],
        notification=NotificationSchema.from_domain(outcome.notification),
    )
