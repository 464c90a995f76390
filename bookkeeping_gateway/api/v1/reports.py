"""GET /v1/reports/* - income/expense, account and overview reports"""

import logging
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from bookkeeping_gateway.api.v1.schemas import (
    AccountReportResponse,
    AccountRow,
    CurrencySchema,
    IncomeExpenseReportResponse,
    OverviewResponse,
    TransactionSchema,
)
from bookkeeping_gateway.api.dependencies import get_request_id, get_supabase_client
from bookkeeping_gateway.infrastructure.clients.supabase import SupabaseClient
from bookkeeping_gateway.infrastructure.observability.metrics import remote_fetch_failures_counter
from bookkeeping_gateway.domain.exceptions import InvalidTransactionDataError, RemoteUpdateError
from bookkeeping_gateway.domain.models import TransactionStatus
from bookkeeping_gateway.domain.reports import account_report, income_expense_report, overview_summary

router = APIRouter()


def _unavailable(e: Exception, request: Request) -> HTTPException:
    remote_fetch_failures_counter.inc()
    logging.error(f"Hosted database error: {e}", extra={"request_id": get_request_id(request)})
    return HTTPException(status_code=503, detail="Hosted database unavailable")


@router.get("/reports/income-expense", response_model=IncomeExpenseReportResponse)
async def get_income_expense_report(
    request: Request,
    account_id: Optional[str] = Query(None),
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    supabase: SupabaseClient = Depends(get_supabase_client),
):
    """Approved transactions of one account in a date range, oldest first"""
    try:
        transactions = await supabase.fetch_transactions(TransactionStatus.APPROVED)
    except (RemoteUpdateError, InvalidTransactionDataError) as e:
        raise _unavailable(e, request)

    rows = income_expense_report(transactions, account_id, date_from, date_to)
    return IncomeExpenseReportResponse(
        account_id=rows[0].account.id if rows else None,
        account_name=rows[0].account.name if rows else None,
        date_from=date_from,
        date_to=date_to,
        transactions=[TransactionSchema.from_domain(t) for t in rows],
    )


@router.get("/reports/accounts", response_model=AccountReportResponse)
async def get_account_report(
    request: Request,
    supabase: SupabaseClient = Depends(get_supabase_client),
):
    """Account balances with per-currency totals"""
    try:
        accounts = await supabase.fetch_accounts()
        currencies = await supabase.fetch_currencies()
    except (RemoteUpdateError, InvalidTransactionDataError) as e:
        raise _unavailable(e, request)

    report = account_report(accounts, currencies)
    return AccountReportResponse(
        accounts=[AccountRow.from_domain(a) for a in report.accounts],
        currencies=[CurrencySchema.from_domain(c) for c in report.currencies],
        totals=report.totals,
    )


@router.get("/reports/overview", response_model=OverviewResponse)
async def get_overview(
    request: Request,
    account_id: Optional[str] = Query(None),
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    supabase: SupabaseClient = Depends(get_supabase_client),
):
    """Dashboard cards for one account and date range"""
    try:
        transactions = await supabase.fetch_transactions(TransactionStatus.APPROVED)
    except (RemoteUpdateError, InvalidTransactionDataError) as e:
        raise _unavailable(e, request)

    summary = overview_summary(transactions, account_id, date_from, date_to)
    return OverviewResponse(
        total_income=summary.total_income,
        total_expense=summary.total_expense,
        donator_count=summary.donator_count,
        latest=[TransactionSchema.from_domain(t) for t in summary.latest],
    )
