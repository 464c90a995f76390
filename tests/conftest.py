"""Pytest fixtures for testing"""

import asyncio
import pytest
from datetime import datetime, timedelta, timezone
from typing import Generator, Iterable, List
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from bookkeeping_gateway.api.main import create_app
from bookkeeping_gateway.infrastructure.database.models import Base
from bookkeeping_gateway.infrastructure.database.session import get_db
from bookkeeping_gateway.domain.exceptions import RemoteUpdateError
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


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

BASE_DATE = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def make_transaction(
    transaction_id: str,
    kind: TransactionKind = TransactionKind.INCOME,
    status: TransactionStatus = TransactionStatus.PENDING,
    amount: float = 100.0,
    account_id: str = "acc-1",
    created_at: datetime | None = None,
    participant: str | None = None,
    remark: str | None = None,
) -> Transaction:
    return Transaction(
        id=transaction_id,
        kind=kind,
        status=status,
        amount=amount,
        account=AccountRef(id=account_id, name=f"Account {account_id}"),
        category=CategoryRef(id="cat-1", name="Offerings" if kind == TransactionKind.INCOME else "Repairs"),
        currency=CurrencyRef(id="cur-lak", name="LAK", symbol="₭"),
        created_at=created_at or BASE_DATE,
        participant=ParticipantRef(id=f"p-{participant}", display_name=participant) if participant else None,
        remark=remark,
    )


class FakeGateway:
    """Records status updates; ids in `fail_ids` raise RemoteUpdateError"""

    def __init__(self, fail_ids: Iterable[str] = ()):
        self.fail_ids = set(fail_ids)
        self.calls: List[tuple] = []
        self.gate: asyncio.Event | None = None

    async def _update(self, kind: TransactionKind, transaction_id: str, patch: StatusPatch) -> dict:
        self.calls.append((kind, transaction_id, patch))
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        if transaction_id in self.fail_ids:
            raise RemoteUpdateError(f"Hosted database error: 500")
        return {"id": transaction_id, **patch.to_payload()}

    async def update_income(self, transaction_id: str, patch: StatusPatch) -> dict:
        return await self._update(TransactionKind.INCOME, transaction_id, patch)

    async def update_expense(self, transaction_id: str, patch: StatusPatch) -> dict:
        return await self._update(TransactionKind.EXPENSE, transaction_id, patch)


class FakeSupabase(FakeGateway):
    """Hosted database stand-in serving fixed rows"""

    def __init__(self, transactions: Iterable[Transaction] = (), fail_ids: Iterable[str] = ()):
        super().__init__(fail_ids)
        self.transactions = list(transactions)
        self.accounts = [
            AccountBalance(id="acc-1", name="Temple fund", balance=1500.0, currency_id="cur-lak"),
            AccountBalance(id="acc-2", name="Building fund", balance=-200.0, currency_id="cur-lak"),
            AccountBalance(id="acc-3", name="Dollar reserve", balance=40.0, currency_id="cur-usd"),
        ]
        self.currencies = [
            CurrencyInfo(id="cur-lak", name="LAK", symbol="₭"),
            CurrencyInfo(id="cur-usd", name="USD", symbol="$"),
        ]
        self.categories = [
            ExpenseCategory(id=f"cat-{i:02d}", name=name)
            for i, name in enumerate(
                ["Repairs", "Electricity", "Water", "Food", "Transport", "Printing",
                 "Flowers", "Candles", "Cleaning", "Stationery", "Fuel", "Medicine"]
            )
        ]
        self.donators = [
            Donator(id="don-1", display_name="Somchai"),
            Donator(id="don-2", display_name="Bounmy"),
        ]
        self.deleted: List[str] = []
        self.unavailable = False

    async def fetch_transactions(self, status: TransactionStatus | None = None) -> List[Transaction]:
        if self.unavailable:
            raise RemoteUpdateError("Hosted database timeout after 5.0s")
        return [t for t in self.transactions if status is None or t.status == status]

    async def fetch_accounts(self) -> List[AccountBalance]:
        if self.unavailable:
            raise RemoteUpdateError("Hosted database timeout after 5.0s")
        return self.accounts

    async def fetch_currencies(self) -> List[CurrencyInfo]:
        return self.currencies

    async def fetch_donators(self) -> List[Donator]:
        if self.unavailable:
            raise RemoteUpdateError("Hosted database timeout after 5.0s")
        return self.donators

    async def fetch_expense_categories(self) -> List[ExpenseCategory]:
        if self.unavailable:
            raise RemoteUpdateError("Hosted database timeout after 5.0s")
        return [c for c in self.categories if c.id not in self.deleted]

    async def delete_expense_category(self, category_id: str) -> dict:
        self.calls.append(("delete", category_id, None))
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        if category_id in self.fail_ids:
            raise RemoteUpdateError("Hosted database error: 409")
        self.deleted.append(category_id)
        return {"id": category_id}


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_txn():
    """Factory for transactions with sensible defaults"""
    return make_transaction


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def pending_transactions() -> List[Transaction]:
    """Twelve pending rows alternating income and expense"""
    return [
        make_transaction(
            f"T{i:02d}",
            kind=TransactionKind.INCOME if i % 2 == 0 else TransactionKind.EXPENSE,
            amount=100.0 * (i + 1),
            created_at=BASE_DATE + timedelta(hours=i),
        )
        for i in range(12)
    ]


@pytest.fixture
def supabase(pending_transactions: List[Transaction]) -> FakeSupabase:
    approved = [
        make_transaction("AP1", status=TransactionStatus.APPROVED, amount=500.0, participant="Somchai",
                         created_at=BASE_DATE + timedelta(days=2)),
        make_transaction("AP2", kind=TransactionKind.EXPENSE, status=TransactionStatus.APPROVED, amount=120.0,
                         created_at=BASE_DATE + timedelta(days=1)),
        make_transaction("AP3", status=TransactionStatus.APPROVED, amount=80.0, account_id="acc-2",
                         created_at=BASE_DATE + timedelta(days=1)),
    ]
    rejected = [make_transaction("RJ1", status=TransactionStatus.REJECTED)]
    return FakeSupabase(pending_transactions + approved + rejected)


@pytest.fixture
def client(db: Session, supabase: FakeSupabase) -> TestClient:
    """Create FastAPI test client with test database and fake hosted database"""
    app = create_app(supabase=supabase)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)
