"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class TransactionKind(str, Enum):
    """Which remote table a transaction lives in"""

    INCOME = "Income"
    EXPENSE = "Expense"


class TransactionStatus(str, Enum):
    """Lifecycle status; APPROVED and REJECTED are terminal"""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


TERMINAL_STATUSES = (TransactionStatus.APPROVED, TransactionStatus.REJECTED)


@dataclass(frozen=True)
class AccountRef:
    id: str
    name: str


@dataclass(frozen=True)
class CategoryRef:
    id: str
    name: str


@dataclass(frozen=True)
class CurrencyRef:
    id: str
    name: str
    symbol: str


@dataclass(frozen=True)
class ParticipantRef:
    """Donator of an income or drawer of an expense"""

    id: str
    display_name: str


@dataclass(frozen=True)
class Transaction:
    """Income or expense record awaiting or past review"""

    id: str
    kind: TransactionKind
    status: TransactionStatus
    amount: float
    account: AccountRef
    category: CategoryRef
    currency: CurrencyRef
    created_at: datetime
    participant: Optional[ParticipantRef] = None
    remark: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None


@dataclass(frozen=True)
class ExpenseCategory:
    id: str
    name: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class StatusPatch:
    """Body of a single remote status update; exactly one date field is set"""

    status: TransactionStatus
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None

    @classmethod
    def for_target(cls, target: TransactionStatus, at: datetime) -> "StatusPatch":
        if target == TransactionStatus.APPROVED:
            return cls(status=target, approved_at=at)
        return cls(status=target, rejected_at=at)

    @property
    def date_field(self) -> str:
        return "approved_at" if self.status == TransactionStatus.APPROVED else "rejected_at"

    @property
    def timestamp(self) -> datetime:
        return self.approved_at if self.approved_at is not None else self.rejected_at

    def to_payload(self) -> Dict[str, Any]:
        return {"status": self.status.value, self.date_field: self.timestamp.isoformat()}


@dataclass
class ItemResult:
    """Settled outcome of one remote update or delete"""

    item: Union[Transaction, ExpenseCategory]
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class NotificationVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notification:
    """Single-shot toast shown to the reviewer"""

    message: str
    variant: NotificationVariant = NotificationVariant.DEFAULT
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class TransitionOutcome:
    """Result of one bulk transition"""

    target: TransactionStatus
    processed: List[Transaction]
    failed: List[ItemResult]
    reconciled: bool
    notification: Notification

    @property
    def succeeded(self) -> bool:
        return not self.failed


@dataclass(frozen=True)
class CurrencyInfo:
    id: str
    name: str
    symbol: str


@dataclass(frozen=True)
class AccountBalance:
    """Account row of the account report"""

    id: str
    name: str
    balance: float
    currency_id: str
    remark: Optional[str] = None


@dataclass(frozen=True)
class Donator:
    id: str
    display_name: str
    created_at: Optional[datetime] = None


@dataclass
class DeletionOutcome:
    """Result of one bulk delete of expense categories"""

    deleted: List[ExpenseCategory]
    failed: List[ItemResult]
    notification: Notification

    @property
    def succeeded(self) -> bool:
        return not self.failed
