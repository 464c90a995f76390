"""Report and overview aggregation over approved transactions"""

from dataclasses import dataclass
from datetime import datetime, time
from typing import Dict, Iterable, List, Optional
from bookkeeping_gateway.domain.models import (
    AccountBalance,
    CurrencyInfo,
    Transaction,
    TransactionKind,
    TransactionStatus,
)

LATEST_TRANSACTIONS = 5


@dataclass
class OverviewSummary:
    """Dashboard cards for one account and date range"""

    total_income: float
    total_expense: float
    donator_count: int
    latest: List[Transaction]


@dataclass
class AccountReport:
    accounts: List[AccountBalance]
    currencies: List[CurrencyInfo]
    totals: Dict[str, float]  # currency id -> summed balance


def _comparable(value: datetime, reference: datetime) -> datetime:
    # Range bounds from a date picker are usually naive
    if value.tzinfo is None and reference.tzinfo is not None:
        return value.replace(tzinfo=reference.tzinfo)
    if value.tzinfo is not None and reference.tzinfo is None:
        return value.replace(tzinfo=None)
    return value


def _in_range(txn: Transaction, date_from: datetime, date_to: datetime) -> bool:
    created = txn.created_at
    return _comparable(date_from, created) <= created <= _comparable(date_to, created)


def income_expense_report(
    transactions: Iterable[Transaction],
    account_id: Optional[str],
    date_from: Optional[datetime],
    date_to: Optional[datetime],
) -> List[Transaction]:
    """
    Approved transactions of one account within [date_from, date_to], oldest first.

    Nothing is reported until an account and both range bounds have been chosen.
    """
    if not account_id or date_from is None or date_to is None:
        return []

    rows = [
        t
        for t in transactions
        if t.status == TransactionStatus.APPROVED
        and t.account.id == account_id
        and _in_range(t, date_from, date_to)
    ]
    return sorted(rows, key=lambda t: t.created_at)


def account_report(accounts: Iterable[AccountBalance], currencies: Iterable[CurrencyInfo]) -> AccountReport:
    accounts = list(accounts)
    currencies = list(currencies)
    totals = {
        currency.id: sum(a.balance for a in accounts if a.currency_id == currency.id)
        for currency in currencies
    }
    return AccountReport(accounts=accounts, currencies=currencies, totals=totals)


def overview_summary(
    transactions: Iterable[Transaction],
    account_id: Optional[str],
    date_from: Optional[datetime],
    date_to: Optional[datetime],
) -> OverviewSummary:
    """
    Income/expense totals, donator count and latest activity for the dashboard.

    Both an account and a full date range are required; `date_to` covers
    its whole day.
    """
    if not account_id or date_from is None or date_to is None:
        return OverviewSummary(total_income=0, total_expense=0, donator_count=0, latest=[])

    end_of_day = datetime.combine(date_to.date(), time.max, tzinfo=date_to.tzinfo)
    selected = [
        t
        for t in transactions
        if t.account.id == account_id
        and t.status == TransactionStatus.APPROVED
        and _in_range(t, date_from, end_of_day)
    ]
    incomes = [t for t in selected if t.kind == TransactionKind.INCOME]
    expenses = [t for t in selected if t.kind == TransactionKind.EXPENSE]

    latest = sorted(selected, key=lambda t: t.created_at, reverse=True)[:LATEST_TRANSACTIONS]

    return OverviewSummary(
        total_income=sum(t.amount for t in incomes),
        total_expense=sum(t.amount for t in expenses),
        donator_count=sum(1 for t in incomes if t.participant is not None),
        latest=latest,
    )
