"""Data access layer for the transition audit log"""

from typing import List, Optional
from sqlalchemy.orm import Session
from bookkeeping_gateway.infrastructure.database.models import StatusTransitionRecord
from bookkeeping_gateway.domain.models import TransitionOutcome, TransactionStatus


class TransitionRepository:
    """Repository for bulk transition records"""

    def __init__(self, db: Session):
        self.db = db

    def record_outcome(self, outcome: TransitionOutcome, requested_count: int) -> StatusTransitionRecord:
        """Persist a transition outcome"""
        record = StatusTransitionRecord(
            target=outcome.target.value,
            requested_count=requested_count,
            processed_count=len(outcome.processed),
            failed_count=len(outcome.failed),
            reconciled=outcome.reconciled,
            processed_ids=[t.id for t in outcome.processed],
            failed_ids=[r.item.id for r in outcome.failed],
        )
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return record

    def list_recent(self, target: Optional[TransactionStatus] = None, limit: int = 20) -> List[StatusTransitionRecord]:
        """Fetch recent transitions, newest first"""
        query = self.db.query(StatusTransitionRecord)
        if target is not None:
            query = query.filter(StatusTransitionRecord.target == target.value)
        return (
            query.order_by(StatusTransitionRecord.created_at.desc())
            .limit(limit)
            .all()
        )
