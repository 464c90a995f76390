"""GET /v1/donators - donator listing"""

import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from bookkeeping_gateway.api.v1.schemas import DonatorListResponse, DonatorSchema
from bookkeeping_gateway.api.dependencies import get_request_id, get_supabase_client
from bookkeeping_gateway.infrastructure.clients.supabase import SupabaseClient
from bookkeeping_gateway.infrastructure.observability.metrics import remote_fetch_failures_counter
from bookkeeping_gateway.domain.exceptions import InvalidTransactionDataError, RemoteUpdateError

router = APIRouter()


@router.get(
    "/donators",
    response_model=DonatorListResponse,
    responses={404: {"model": DonatorListResponse}},
)
async def list_donators(request: Request, supabase: SupabaseClient = Depends(get_supabase_client)):
    """
    Every donator row.

    A failed query answers 404 with the same envelope, `success` false and
    the error message.
    """
    try:
        donators = await supabase.fetch_donators()
    except (RemoteUpdateError, InvalidTransactionDataError) as e:
        remote_fetch_failures_counter.inc()
        logging.error(f"Donator query failed: {e}", extra={"request_id": get_request_id(request)})
        body = DonatorListResponse(success=False, message=str(e), data=None)
        return JSONResponse(status_code=404, content=body.model_dump())

    return DonatorListResponse(
        success=True,
        message="Donators retrieval was successful.",
        data=[DonatorSchema.from_domain(d) for d in donators],
    )
