"""GET /v1/transitions/history - Fetch recent bulk transitions"""

from typing import Literal, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bookkeeping_gateway.api.v1.schemas import HistoryResponse, HistoryItem
from bookkeeping_gateway.infrastructure.database.session import get_db
from bookkeeping_gateway.infrastructure.database.repositories import TransitionRepository
from bookkeeping_gateway.domain.models import TransactionStatus

router = APIRouter()


@router.get("/transitions/history", response_model=HistoryResponse)
def get_transition_history(
    target: Optional[Literal["APPROVED", "REJECTED"]] = Query(None, description="Only this target status"),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """
    Retrieve recent bulk transitions.

    Returns:
        List of runs with requested/processed/failed counts
    """
    repo = TransitionRepository(db)
    records = repo.list_recent(TransactionStatus(target) if target else None, limit=limit)

    history_items = [
        HistoryItem(
            transition_id=str(r.id),
            target=r.target,
            requested_count=r.requested_count,
            processed_count=r.processed_count,
            failed_count=r.failed_count,
            reconciled=r.reconciled,
            created_at=r.created_at.isoformat(),
        )
        for r in records
    ]

    return HistoryResponse(transitions=history_items)
