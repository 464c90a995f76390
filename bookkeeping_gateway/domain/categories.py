"""Expense category table with bulk delete of the selected rows"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Protocol
from bookkeeping_gateway.domain.exceptions import DeletionInProgressError
from bookkeeping_gateway.domain.models import (
    DeletionOutcome,
    ExpenseCategory,
    ItemResult,
    Notification,
    NotificationVariant,
)
from bookkeeping_gateway.domain.selection import SelectionTracker
from bookkeeping_gateway.domain.stores import ExpenseCategoryStore
from bookkeeping_gateway.infrastructure.notifications import Notifier
from bookkeeping_gateway.infrastructure.observability.metrics import remote_delete_failures_counter

logger = logging.getLogger(__name__)

CATEGORY_COLUMNS = {
    "name": lambda c: c.name.lower(),
}


class CategoryDeleteGateway(Protocol):
    async def delete_expense_category(self, category_id: str) -> Dict[str, Any]: ...


def category_matches_filter(category: ExpenseCategory, text: str) -> bool:
    needle = text.strip().lower()
    return not needle or needle in category.name.lower() or needle in category.id.lower()


class ExpenseCategoryWorkspace:
    """
    Category table state and its bulk delete.

    A delete removes rows locally only when the hosted database accepted
    every one of them; otherwise the store is left as it was.
    """

    def __init__(self, gateway: CategoryDeleteGateway, notifier: Notifier, page_size: int = 10):
        self.gateway = gateway
        self.notifier = notifier
        self.store = ExpenseCategoryStore()
        self.tracker = SelectionTracker(
            self.store.get,
            page_size=page_size,
            matches=category_matches_filter,
            columns=CATEGORY_COLUMNS,
        )
        self.deleting = False
        self.generation = 0

    @property
    def busy(self) -> bool:
        return self.deleting

    def load(self, categories: Iterable[ExpenseCategory]) -> None:
        self.store.set(categories)
        self.tracker.set_page(0)

    async def refresh(self, fetch: Callable[[], Awaitable[List[ExpenseCategory]]]) -> bool:
        """
        Reload the table unless a delete overlapped the fetch.

        Raises:
            DeletionInProgressError: A delete has not settled yet
        """
        if self.busy:
            raise DeletionInProgressError("A delete is already running")

        generation = self.generation
        categories = await fetch()
        if self.busy or self.generation != generation:
            logger.warning("Discarded category refresh overlapping a delete")
            return False

        self.load(categories)
        return True

    async def delete_selected(self) -> Optional[DeletionOutcome]:
        """
        Delete every selected category.

        Returns:
            The outcome, or None when nothing is selected

        Raises:
            DeletionInProgressError: Another delete has not settled yet
        """
        if self.busy:
            raise DeletionInProgressError("A delete is already running")

        batch = self.tracker.selected()
        if not batch:
            return None

        self.deleting = True
        self.generation += 1
        try:
            results = await asyncio.gather(*(self._delete_one(item) for item in batch))
        finally:
            self.deleting = False

        failed = [r for r in results if not r.ok]
        if failed:
            notification = Notification(
                message="Could not delete the selected expense categories.",
                variant=NotificationVariant.DESTRUCTIVE,
            )
            deleted: List[ExpenseCategory] = []
        else:
            removed = {c.id for c in batch}
            self.store.set(c for c in self.store.get() if c.id not in removed)
            self.tracker.set_page(0)
            notification = Notification(message="Deleted all selected expense categories.")
            deleted = batch

        self.notifier.notify(notification)
        logger.info(
            "Expense category delete completed",
            extra={"item_count": len(batch), "failed_count": len(failed)},
        )
        return DeletionOutcome(deleted=deleted, failed=failed, notification=notification)

    async def _delete_one(self, item: ExpenseCategory) -> ItemResult:
        try:
            await self.gateway.delete_expense_category(item.id)
        except Exception as e:
            remote_delete_failures_counter.labels(table="expense_category").inc()
            logger.warning(
                f"Delete failed for expense category {item.id}: {e}",
                extra={"category_id": item.id},
            )
            return ItemResult(item=item, error=e)
        return ItemResult(item=item)
