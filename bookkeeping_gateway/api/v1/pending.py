"""/v1/pending - review table state and bulk approve/reject"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bookkeeping_gateway.api.v1.schemas import (
    FilterRequest,
    NotificationSchema,
    PageRequest,
    PendingPageResponse,
    SelectionRequest,
    TransactionSchema,
    TransitionRequest,
    TransitionResponse,
)
from bookkeeping_gateway.api.dependencies import get_request_id, get_supabase_client, get_workspace
from bookkeeping_gateway.infrastructure.database.session import get_db
from bookkeeping_gateway.infrastructure.database.repositories import TransitionRepository
from bookkeeping_gateway.infrastructure.clients.supabase import SupabaseClient
from bookkeeping_gateway.infrastructure.observability.metrics import remote_fetch_failures_counter
from bookkeeping_gateway.domain.exceptions import (
    InvalidTransactionDataError,
    InvalidTransitionError,
    RemoteUpdateError,
    TransitionInProgressError,
)
from bookkeeping_gateway.domain.models import TransactionStatus
from bookkeeping_gateway.domain.workspace import PendingWorkspace

router = APIRouter()


def _page(workspace: PendingWorkspace) -> PendingPageResponse:
    tracker = workspace.tracker
    return PendingPageResponse(
        rows=[TransactionSchema.from_domain(t) for t in tracker.rows()],
        selected_ids=[t.id for t in tracker.selected()],
        page_index=tracker.state.page_index,
        page_size=tracker.state.page_size,
        page_count=tracker.page_count(),
        total=len(tracker.filtered_rows()),
        busy=workspace.busy,
    )


@router.get("/pending", response_model=PendingPageResponse)
async def get_pending(workspace: PendingWorkspace = Depends(get_workspace)):
    """Current page of pending transactions with its selection"""
    return _page(workspace)


@router.post("/pending/refresh", response_model=PendingPageResponse)
async def refresh_pending(
    request: Request,
    workspace: PendingWorkspace = Depends(get_workspace),
    supabase: SupabaseClient = Depends(get_supabase_client),
):
    """Reload every store from the hosted database"""
    request_id = get_request_id(request)

    try:
        refreshed = await workspace.refresh(supabase.fetch_transactions)
    except TransitionInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (RemoteUpdateError, InvalidTransactionDataError) as e:
        remote_fetch_failures_counter.inc()
        logging.error(f"Hosted database error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Hosted database unavailable")

    if not refreshed:
        raise HTTPException(status_code=409, detail="Stores changed during refresh, retry")
    return _page(workspace)


@router.post("/pending/selection", response_model=PendingPageResponse)
async def update_selection(body: SelectionRequest, workspace: PendingWorkspace = Depends(get_workspace)):
    tracker = workspace.tracker
    if body.all_page_rows:
        tracker.toggle_all_page_rows(body.value)
    for transaction_id in body.ids:
        tracker.toggle(transaction_id, body.value)
    return _page(workspace)


@router.post("/pending/page", response_model=PendingPageResponse)
async def change_page(body: PageRequest, workspace: PendingWorkspace = Depends(get_workspace)):
    """Change page; always clears the selection"""
    if body.page_size is not None:
        workspace.tracker.set_page_size(body.page_size)
    workspace.tracker.set_page(body.page_index)
    return _page(workspace)


@router.post("/pending/filter", response_model=PendingPageResponse)
async def change_filter(body: FilterRequest, workspace: PendingWorkspace = Depends(get_workspace)):
    workspace.tracker.set_filter(body.text)
    workspace.tracker.set_sorting(body.sort_column, body.sort_descending)
    return _page(workspace)


@router.post("/pending/transition", response_model=TransitionResponse)
async def transition_selected(
    body: TransitionRequest,
    request: Request,
    db: Session = Depends(get_db),
    workspace: PendingWorkspace = Depends(get_workspace),
):
    """
    Approve or reject every selected row.

    Flow:
    1. Refuse while another transition is in flight
    2. Push the new status of each selected row to the hosted database
    3. Move confirmed rows out of the pending store
    4. Record the run in the audit log
    """
    request_id = get_request_id(request)
    target = TransactionStatus(body.target)
    requested = len(workspace.tracker.selected())

    try:
        outcome = await workspace.transition_selected(target)
    except TransitionInProgressError as e:
        logging.warning(f"Transition rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))
    except InvalidTransitionError as e:
        logging.warning(f"Invalid transition: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    if outcome is None:
        return TransitionResponse(target=target.value, processed_ids=[], failed_ids=[], reconciled=False)

    try:
        TransitionRepository(db).record_outcome(outcome, requested_count=requested)
        db.commit()
    except SQLAlchemyError as e:
        # Stores already reflect the hosted database at this point
        db.rollback()
        logging.error(f"Failed to record transition: {e}", extra={"request_id": request_id})

    return TransitionResponse(
        target=target.value,
        processed_ids=[t.id for t in outcome.processed],
        failed_ids=[r.item.id for r in outcome.failed],
        reconciled=outcome.reconciled,
        notification=NotificationSchema.from_domain(outcome.notification),
    )
