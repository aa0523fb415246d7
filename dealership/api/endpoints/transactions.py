from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from dealership.api.pipeline import get_request_context, respond, run_guarded
from dealership.core.context import RequestContext
from dealership.services import ledger

router = APIRouter()

@router.get("")
def list_transactions(
    transaction_type: Optional[str] = Query(None, alias="type", description="e.g., 'payment'"),
    status_filter: Optional[str] = Query(None, alias="status", description="Transaction status"),
    ctx: RequestContext = Depends(get_request_context),
):
    result = run_guarded(
        ctx, "VIEW_TRANSACTIONS", lambda user: ledger.list_transactions(ctx, transaction_type, status_filter)
    )
    return respond(result, message="Transactions retrieved successfully")

@router.post("")
def create_transaction(body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(ctx, "CREATE_TRANSACTIONS", lambda user: ledger.create_transaction(ctx, user, body))
    return respond(result, status.HTTP_201_CREATED, "Transaction recorded successfully")
