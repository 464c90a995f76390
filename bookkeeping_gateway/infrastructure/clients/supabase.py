"""Hosted database (Supabase REST) client for transactions, reference tables and donators"""

import httpx
from datetime import datetime
from typing import Any, Dict, List, Optional
from bookkeeping_gateway.domain.models import (
    AccountBalance,
    AccountRef,
    CategoryRef,
    CurrencyInfo,
    CurrencyRef,
    Donator,
    ExpenseCategory,
    ParticipantRef,
    StatusPatch,
    Transaction,
    TransactionKind,
    TransactionStatus,
)
from bookkeeping_gateway.domain.exceptions import RemoteUpdateError, InvalidTransactionDataError
from bookkeeping_gateway.config import settings

TABLES = {
    TransactionKind.INCOME: "income",
    TransactionKind.EXPENSE: "expense",
}

# Embedded relation holding the counterparty of each kind
PARTICIPANT_RELATION = {
    TransactionKind.INCOME: "donator",
    TransactionKind.EXPENSE: "drawer",
}


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def parse_transaction(row: Dict[str, Any], kind: TransactionKind) -> Transaction:
    """
    Build a Transaction from a PostgREST row with embedded relations.

    Raises:
        InvalidTransactionDataError: On missing keys or unparseable values
    """
    try:
        participant = row.get(PARTICIPANT_RELATION[kind])
        return Transaction(
            id=str(row["id"]),
            kind=kind,
            status=TransactionStatus(row["status"]),
            amount=float(row["amount"]),
            account=AccountRef(id=str(row["account"]["id"]), name=row["account"]["name"]),
            category=CategoryRef(id=str(row["category"]["id"]), name=row["category"]["name"]),
            currency=CurrencyRef(
                id=str(row["currency"]["id"]),
                name=row["currency"]["name"],
                symbol=row["currency"]["symbol"],
            ),
            created_at=_parse_datetime(row["created_at"]),
            participant=(
                ParticipantRef(id=str(participant["id"]), display_name=participant["display_name"])
                if participant
                else None
            ),
            remark=row.get("remark"),
            approved_at=_parse_datetime(row.get("approved_at")),
            rejected_at=_parse_datetime(row.get("rejected_at")),
        )
    except (KeyError, ValueError, TypeError) as e:
        raise InvalidTransactionDataError(f"Invalid {kind.value} row: {e}") from e


class SupabaseClient:
    """Client for the hosted database REST API (PostgREST)"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.supabase_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self.base_url}/rest/v1",
            timeout=self.timeout,
            transport=self.transport,
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
            },
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        async with self._client() as client:
            try:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
                return response.json()
            except httpx.TimeoutException as e:
                raise RemoteUpdateError(f"Hosted database timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise RemoteUpdateError(f"Hosted database error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise RemoteUpdateError(f"Hosted database unreachable: {e}") from e
            except ValueError as e:
                raise RemoteUpdateError(f"Invalid response from hosted database: {e}") from e

    async def _update(self, kind: TransactionKind, transaction_id: str, patch: StatusPatch) -> Dict[str, Any]:
        """
        Persist a status patch and return the stored row.

        Raises:
            RemoteUpdateError: On timeout, HTTP errors, or when no row matched
        """
        rows = await self._request(
            "PATCH",
            f"/{TABLES[kind]}",
            params={"id": f"eq.{transaction_id}"},
            json=patch.to_payload(),
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise RemoteUpdateError(f"{kind.value} {transaction_id} not found")
        return rows[0]

    async def update_income(self, transaction_id: str, patch: StatusPatch) -> Dict[str, Any]:
        return await self._update(TransactionKind.INCOME, transaction_id, patch)

    async def update_expense(self, transaction_id: str, patch: StatusPatch) -> Dict[str, Any]:
        return await self._update(TransactionKind.EXPENSE, transaction_id, patch)

    async def fetch_transactions(self, status: TransactionStatus | None = None) -> List[Transaction]:
        """Fetch incomes and expenses, optionally restricted to one status"""
        transactions: List[Transaction] = []
        for kind, table in TABLES.items():
            params = {
                "select": f"*,account(*),category(*),currency(*),{PARTICIPANT_RELATION[kind]}(*)",
                "order": "created_at.desc",
            }
            if status is not None:
                params["status"] = f"eq.{status.value}"

            rows = await self._request("GET", f"/{table}", params=params)
            transactions.extend(parse_transaction(row, kind) for row in rows)
        return transactions

    async def fetch_accounts(self) -> List[AccountBalance]:
        rows = await self._request("GET", "/account", params={"select": "*", "order": "name.asc"})
        try:
            return [
                AccountBalance(
                    id=str(row["id"]),
                    name=row["name"],
                    balance=float(row["balance"]),
                    currency_id=str(row["currency_id"]),
                    remark=row.get("remark"),
                )
                for row in rows
            ]
        except (KeyError, ValueError, TypeError) as e:
            raise InvalidTransactionDataError(f"Invalid account row: {e}") from e

    async def fetch_currencies(self) -> List[CurrencyInfo]:
        rows = await self._request("GET", "/currency", params={"select": "*"})
        try:
            return [CurrencyInfo(id=str(row["id"]), name=row["name"], symbol=row["symbol"]) for row in rows]
        except (KeyError, TypeError) as e:
            raise InvalidTransactionDataError(f"Invalid currency row: {e}") from e

    async def fetch_donators(self) -> List[Donator]:
        rows = await self._request("GET", "/donator", params={"select": "*"})
        try:
            return [
                Donator(
                    id=str(row["id"]),
                    display_name=row["display_name"],
                    created_at=_parse_datetime(row.get("created_at")),
                )
                for row in rows
            ]
        except (KeyError, ValueError, TypeError) as e:
            raise InvalidTransactionDataError(f"Invalid donator row: {e}") from e

    async def fetch_expense_categories(self) -> List[ExpenseCategory]:
        rows = await self._request(
            "GET", "/expense_category", params={"select": "*", "order": "created_at.desc"}
        )
        try:
            return [
                ExpenseCategory(
                    id=str(row["id"]),
                    name=row["name"],
                    created_at=_parse_datetime(row.get("created_at")),
                )
                for row in rows
            ]
        except (KeyError, ValueError, TypeError) as e:
            raise InvalidTransactionDataError(f"Invalid expense category row: {e}") from e

    async def delete_expense_category(self, category_id: str) -> Dict[str, Any]:
        """
        Delete one expense category and return the removed row.

        Raises:
            RemoteUpdateError: On timeout, HTTP errors, or when no row matched
        """
        rows = await self._request(
            "DELETE",
            "/expense_category",
            params={"id": f"eq.{category_id}"},
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise RemoteUpdateError(f"Expense category {category_id} not found")
        return rows[0]
