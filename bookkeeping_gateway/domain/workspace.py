"""Pending-review view: stores, table selection and the in-flight guard"""

import logging
from typing import Awaitable, Callable, Iterable, List, Optional

from bookkeeping_gateway.domain.exceptions import TransitionInProgressError
from bookkeeping_gateway.domain.models import Transaction, TransactionStatus, TransitionOutcome
from bookkeeping_gateway.domain.selection import SelectionTracker
from bookkeeping_gateway.domain.stores import StoreSet
from bookkeeping_gateway.domain.transitions import BulkStatusTransitionWorkflow

logger = logging.getLogger(__name__)


class PendingWorkspace:
    """Owns the state of one review view for its lifetime"""

    def __init__(self, workflow: BulkStatusTransitionWorkflow, page_size: int = 10):
        self.workflow = workflow
        self.stores: StoreSet = workflow.stores
        self.tracker = SelectionTracker(self.stores.pending.get, page_size=page_size)
        self.in_flight: Optional[TransactionStatus] = None
        # Bumped whenever a transition starts; a refresh spanning a bump is stale
        self.generation = 0

    def load(self, transactions: Iterable[Transaction]) -> None:
        self.stores.load(transactions)
        self.tracker.set_page(0)

    @property
    def busy(self) -> bool:
        return self.in_flight is not None

    async def refresh(self, fetch: Callable[[], Awaitable[List[Transaction]]]) -> bool:
        """
        Reload every store from `fetch` unless a transition overlapped it.

        Returns False, leaving the stores as they are, when a transition
        started while the fetch was outstanding.

        Raises:
            TransitionInProgressError: A transition has not settled yet
        """
        if self.busy:
            raise TransitionInProgressError(f"A {self.in_flight.value} transition is already running")

        generation = self.generation
        transactions = await fetch()

        if self.busy or self.generation != generation:
            logger.warning(
                "Discarded refresh overlapping a transition",
                extra={"fetched_count": len(transactions)},
            )
            return False

        self.load(transactions)
        return True

    async def transition_selected(self, target: TransactionStatus) -> Optional[TransitionOutcome]:
        """
        Run the workflow on the current selection.

        Raises:
            TransitionInProgressError: Another transition has not settled yet
        """
        if self.busy:
            raise TransitionInProgressError(f"A {self.in_flight.value} transition is already running")

        self.in_flight = target
        self.generation += 1
        try:
            outcome = await self.workflow.transition(self.tracker.selected(), target)
        finally:
            self.in_flight = None

        if outcome is not None and outcome.reconciled:
            # The pending rows changed, so the table starts over on its first page
            self.tracker.set_page(0)
        return outcome
