"""In-memory transaction stores backing the review dashboard"""

from dataclasses import dataclass, field
from typing import Iterable, List, Set, Tuple
from bookkeeping_gateway.domain.models import Transaction, TransactionStatus


class Store:
    """
    Holder of one ordered sequence of rows (transactions or categories).

    Updates are wholesale replacements computed by the caller from the
    previous sequence. No indexed mutation API is offered.
    """

    def __init__(self, transactions: Iterable[Transaction] = ()):
        self._transactions: Tuple[Transaction, ...] = tuple(transactions)

    def get(self) -> List[Transaction]:
        return list(self._transactions)

    def set(self, transactions: Iterable[Transaction]) -> None:
        self._transactions = tuple(transactions)

    def ids(self) -> Set[str]:
        return {t.id for t in self._transactions}

    def __len__(self) -> int:
        return len(self._transactions)


class TransactionStore(Store):
    """Transactions still waiting for review"""


class ApprovedStore(Store):
    """Transactions that reached APPROVED"""


class RejectedStore(Store):
    """Transactions that reached REJECTED"""


class ExpenseCategoryStore(Store):
    """Expense categories shown in the category table"""


@dataclass
class StoreSet:
    """The three stores of one view, passed around as a unit"""

    pending: TransactionStore = field(default_factory=TransactionStore)
    approved: ApprovedStore = field(default_factory=ApprovedStore)
    rejected: RejectedStore = field(default_factory=RejectedStore)

    def destination(self, target: TransactionStatus) -> Store:
        """Terminal store for a target status"""
        if target == TransactionStatus.APPROVED:
            return self.approved
        if target == TransactionStatus.REJECTED:
            return self.rejected
        raise ValueError(f"No terminal store for status {target}")

    def load(self, transactions: Iterable[Transaction]) -> None:
        """Distribute a fetched list into the stores by status"""
        buckets = {status: [] for status in TransactionStatus}
        for txn in transactions:
            buckets[txn.status].append(txn)

        self.pending.set(buckets[TransactionStatus.PENDING])
        self.approved.set(buckets[TransactionStatus.APPROVED])
        self.rejected.set(buckets[TransactionStatus.REJECTED])
