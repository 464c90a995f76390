"""FastAPI application factory"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from bookkeeping_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from bookkeeping_gateway.api.v1 import categories, donators, history, pending, reports, transactions
from bookkeeping_gateway.domain.categories import ExpenseCategoryWorkspace
from bookkeeping_gateway.domain.stores import StoreSet
from bookkeeping_gateway.domain.transitions import BulkStatusTransitionWorkflow, RemoteUpdateGateway
from bookkeeping_gateway.domain.workspace import PendingWorkspace
from bookkeeping_gateway.infrastructure.clients.supabase import SupabaseClient
from bookkeeping_gateway.infrastructure.database.models import Base
from bookkeeping_gateway.infrastructure.database.session import engine
from bookkeeping_gateway.infrastructure.notifications import NotificationCenter
from bookkeeping_gateway.infrastructure.observability.logging import setup_logging
from bookkeeping_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    yield


def create_app(supabase: SupabaseClient | None = None, gateway: RemoteUpdateGateway | None = None) -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Bookkeeping Gateway",
        description="Transaction review, bulk approval and financial reports",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Pending view state lives as long as the process
    supabase = supabase or SupabaseClient()
    notifications = NotificationCenter(history_size=settings.notification_history_size)
    workflow = BulkStatusTransitionWorkflow(
        stores=StoreSet(),
        gateway=gateway or supabase,
        notifier=notifications,
        partial_reconciliation=settings.partial_reconciliation,
    )
    app.state.supabase = supabase
    app.state.notifications = notifications
    app.state.workspace = PendingWorkspace(workflow, page_size=settings.default_page_size)
    app.state.categories = ExpenseCategoryWorkspace(
        supabase, notifications, page_size=settings.default_page_size
    )

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(pending.router, prefix="/v1", tags=["pending"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(history.router, prefix="/v1", tags=["history"])
    app.include_router(reports.router, prefix="/v1", tags=["reports"])
    app.include_router(categories.router, prefix="/v1", tags=["expense-categories"])
    app.include_router(donators.router, prefix="/v1", tags=["donators"])

    return app


app = create_app()
