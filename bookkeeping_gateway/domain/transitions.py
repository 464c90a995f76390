"""Bulk pending -> approved/rejected transitions with local store reconciliation"""

import asyncio
import logging
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Tuple

from bookkeeping_gateway.domain.exceptions import InvalidTransitionError
from bookkeeping_gateway.domain.models import (
    TERMINAL_STATUSES,
    ItemResult,
    Notification,
    NotificationVariant,
    StatusPatch,
    Transaction,
    TransactionKind,
    TransactionStatus,
    TransitionOutcome,
)
from bookkeeping_gateway.domain.stores import StoreSet
from bookkeeping_gateway.infrastructure.notifications import Notifier
from bookkeeping_gateway.infrastructure.observability.logging import log_transition
from bookkeeping_gateway.infrastructure.observability.metrics import (
    record_transition,
    remote_update_failures_counter,
    remote_update_latency_histogram,
)

logger = logging.getLogger(__name__)

VERBS = {
    TransactionStatus.APPROVED: ("approve", "Approved"),
    TransactionStatus.REJECTED: ("reject", "Rejected"),
}


class RemoteUpdateGateway(Protocol):
    """Persists a status patch for one transaction of each kind"""

    async def update_income(self, transaction_id: str, patch: StatusPatch) -> Dict[str, Any]: ...

    async def update_expense(self, transaction_id: str, patch: StatusPatch) -> Dict[str, Any]: ...


def partition_by_kind(items: Iterable[Transaction]) -> Tuple[List[Transaction], List[Transaction]]:
    """Split items into (income, expense); every item lands in exactly one list"""
    income_items: List[Transaction] = []
    expense_items: List[Transaction] = []
    for item in items:
        if item.kind == TransactionKind.INCOME:
            income_items.append(item)
        else:
            expense_items.append(item)
    return income_items, expense_items


def apply_patch(item: Transaction, patch: StatusPatch) -> Transaction:
    """Copy of item as it should appear in its destination store"""
    return replace(
        item,
        status=patch.status,
        approved_at=patch.approved_at,
        rejected_at=patch.rejected_at,
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BulkStatusTransitionWorkflow:
    """
    Moves a selection of pending transactions to a terminal status.

    All remote updates are issued at once and awaited together; the stores
    are only touched after every call has settled, in a single step with no
    suspension point in between.

    With `partial_reconciliation` off, one failed update leaves every store
    unchanged. With it on, items the hosted database accepted are moved and
    the failed ones stay pending.
    """

    def __init__(
        self,
        stores: StoreSet,
        gateway: RemoteUpdateGateway,
        notifier: Notifier,
        partial_reconciliation: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.stores = stores
        self.gateway = gateway
        self.notifier = notifier
        self.partial_reconciliation = partial_reconciliation
        self.clock = clock

    async def transition(
        self, items: Iterable[Transaction], target: TransactionStatus
    ) -> Optional[TransitionOutcome]:
        """
        Drive one bulk transition.

        Returns:
            The outcome, or None when `items` is empty (no calls, no notification)

        Raises:
            InvalidTransitionError: target is not terminal or an item is not pending
        """
        if target not in TERMINAL_STATUSES:
            raise InvalidTransitionError(f"Cannot transition to {target}")

        unique: Dict[str, Transaction] = {}
        for item in items:
            unique.setdefault(item.id, item)
        batch = list(unique.values())
        if not batch:
            return None

        not_pending = [item.id for item in batch if item.status != TransactionStatus.PENDING]
        if not_pending:
            raise InvalidTransitionError(f"Transactions are not pending: {', '.join(not_pending)}")

        start_time = time.time()
        patch = StatusPatch.for_target(target, self.clock())
        income_items, expense_items = partition_by_kind(batch)

        # Fan-out, then fan-in before any store is read or written
        results = await asyncio.gather(
            *(self._update_one(item, patch) for item in income_items),
            *(self._update_one(item, patch) for item in expense_items),
        )

        failed = [r for r in results if not r.ok]
        if failed and not self.partial_reconciliation:
            processed: List[Transaction] = []
        else:
            processed = [apply_patch(r.item, patch) for r in results if r.ok]

        if processed:
            self._reconcile(processed, target)

        notification = self._notification(target, len(batch), len(failed))
        self.notifier.notify(notification)

        record_transition(target.value, len(processed), len(failed))
        log_transition(
            target=target.value,
            item_count=len(batch),
            processed_count=len(processed),
            failed_count=len(failed),
            reconciled=bool(processed),
            duration_ms=(time.time() - start_time) * 1000,
        )

        return TransitionOutcome(
            target=target,
            processed=processed,
            failed=failed,
            reconciled=bool(processed),
            notification=notification,
        )

    async def _update_one(self, item: Transaction, patch: StatusPatch) -> ItemResult:
        update = (
            self.gateway.update_income
            if item.kind == TransactionKind.INCOME
            else self.gateway.update_expense
        )
        try:
            with remote_update_latency_histogram.labels(kind=item.kind.value).time():
                await update(item.id, patch)
        except Exception as e:
            remote_update_failures_counter.labels(kind=item.kind.value).inc()
            logger.warning(
                f"Status update failed for {item.kind.value} {item.id}: {e}",
                extra={"transaction_id": item.id, "target": patch.status.value},
            )
            return ItemResult(item=item, error=e)
        return ItemResult(item=item)

    def _reconcile(self, processed: List[Transaction], target: TransactionStatus) -> None:
        moved = {t.id for t in processed}
        destination = self.stores.destination(target)

        self.stores.pending.set(t for t in self.stores.pending.get() if t.id not in moved)
        destination.set(processed + destination.get())

    def _notification(self, target: TransactionStatus, total: int, failed: int) -> Notification:
        verb, past = VERBS[target]
        if failed == 0:
            return Notification(message=f"{past} {total} selected transactions.")
        if self.partial_reconciliation and failed < total:
            return Notification(
                message=f"Could not {verb} {failed} of {total} selected transactions.",
                variant=NotificationVariant.DESTRUCTIVE,
            )
        return Notification(
            message=f"Could not {verb} the selected transactions.",
            variant=NotificationVariant.DESTRUCTIVE,
        )
