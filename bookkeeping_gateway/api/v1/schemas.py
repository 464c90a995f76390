"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Dict, List, Literal, Optional
from bookkeeping_gateway.domain.models import (
    AccountBalance,
    CurrencyInfo,
    Donator,
    ExpenseCategory,
    Notification,
    Transaction,
)


class TransactionSchema(BaseModel):
    """Transaction row as rendered in the tables"""

    id: str
    kind: str
    status: str
    amount: float
    account_id: str
    account_name: str
    category_id: str
    category_name: str
    currency_symbol: str
    participant_name: Optional[str] = None
    remark: Optional[str] = None
    created_at: datetime
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, txn: Transaction) -> "TransactionSchema":
        return cls(
            id=txn.id,
            kind=txn.kind.value,
            status=txn.status.value,
            amount=txn.amount,
            account_id=txn.account.id,
            account_name=txn.account.name,
            category_id=txn.category.id,
            category_name=txn.category.name,
            currency_symbol=txn.currency.symbol,
            participant_name=txn.participant.display_name if txn.participant else None,
            remark=txn.remark,
            created_at=txn.created_at,
            approved_at=txn.approved_at,
            rejected_at=txn.rejected_at,
        )


class NotificationSchema(BaseModel):
    message: str
    variant: str
    created_at: datetime

    @classmethod
    def from_domain(cls, notification: Notification) -> "NotificationSchema":
        return cls(
            message=notification.message,
            variant=notification.variant.value,
            created_at=notification.created_at,
        )


class PendingPageResponse(BaseModel):
    """Response for GET /v1/pending"""

    rows: List[TransactionSchema]
    selected_ids: List[str]
    page_index: int
    page_size: int
    page_count: int
    total: int
    busy: bool


class SelectionRequest(BaseModel):
    """Request body for POST /v1/pending/selection"""

    ids: List[str] = Field(default_factory=list, description="Row ids to toggle")
    value: bool = True
    all_page_rows: bool = Field(False, description="Toggle every row of the current page")


class PageRequest(BaseModel):
    """Request body for POST /v1/pending/page"""

    page_index: int = Field(..., ge=0)
    page_size: Optional[int] = Field(None, ge=1, le=200)


class FilterRequest(BaseModel):
    """Request body for POST /v1/pending/filter"""

    text: str = ""
    sort_column: Optional[Literal["amount", "created_at", "account", "category", "kind"]] = None
    sort_descending: bool = False


class TransitionRequest(BaseModel):
    """Request body for POST /v1/pending/transition"""

    target: Literal["APPROVED", "REJECTED"]


class TransitionResponse(BaseModel):
    """Response for POST /v1/pending/transition"""

    target: str
    processed_ids: List[str]
    failed_ids: List[str]
    reconciled: bool
    notification: Optional[NotificationSchema] = None


class TransactionListResponse(BaseModel):
    transactions: List[TransactionSchema]


class NotificationListResponse(BaseModel):
    notifications: List[NotificationSchema]


class HistoryItem(BaseModel):
    """Single transition in history"""

    transition_id: str
    target: str
    requested_count: int
    processed_count: int
    failed_count: int
    reconciled: bool
    created_at: str


class HistoryResponse(BaseModel):
    """Response for GET /v1/transitions/history"""

    transitions: List[HistoryItem]


class IncomeExpenseReportResponse(BaseModel):
    account_id: Optional[str] = None
    account_name: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    transactions: List[TransactionSchema]


class AccountRow(BaseModel):
    id: str
    name: str
    balance: float
    currency_id: str
    remark: Optional[str] = None

    @classmethod
    def from_domain(cls, account: AccountBalance) -> "AccountRow":
        return cls(
            id=account.id,
            name=account.name,
            balance=account.balance,
            currency_id=account.currency_id,
            remark=account.remark,
        )


class CurrencySchema(BaseModel):
    id: str
    name: str
    symbol: str

    @classmethod
    def from_domain(cls, currency: CurrencyInfo) -> "CurrencySchema":
        return cls(id=currency.id, name=currency.name, symbol=currency.symbol)


class AccountReportResponse(BaseModel):
    accounts: List[AccountRow]
    currencies: List[CurrencySchema]
    totals: Dict[str, float]


class OverviewResponse(BaseModel):
    total_income: float
    total_expense: float
    donator_count: int
    latest: List[TransactionSchema]


class ExpenseCategorySchema(BaseModel):
    id: str
    name: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, category: ExpenseCategory) -> "ExpenseCategorySchema":
        return cls(id=category.id, name=category.name, created_at=category.created_at)


class CategoryPageResponse(BaseModel):
    """Response for GET /v1/expense-categories"""

    rows: List[ExpenseCategorySchema]
    selected_ids: List[str]
    page_index: int
    page_size: int
    page_count: int
    total: int
    busy: bool


class CategoryFilterRequest(BaseModel):
    """Request body for POST /v1/expense-categories/filter"""

    text: str = ""
    sort_column: Optional[Literal["name"]] = None
    sort_descending: bool = False


class CategoryDeleteResponse(BaseModel):
    """Response for POST /v1/expense-categories/delete"""

    deleted_ids: List[str]
    failed_ids: List[str]
    notification: Optional[NotificationSchema] = None


class DonatorSchema(BaseModel):
    id: str
    display_name: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, donator: Donator) -> "DonatorSchema":
        return cls(id=donator.id, display_name=donator.display_name, created_at=donator.created_at)


class DonatorListResponse(BaseModel):
    """Envelope of GET /v1/donators, also used for its 404 body"""

    success: bool
    message: Optional[str] = None
    data: Optional[List[DonatorSchema]] = None
