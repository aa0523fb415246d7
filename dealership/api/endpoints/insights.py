from typing import Any

from fastapi import APIRouter, Body, Depends

from dealership.api.pipeline import get_request_context, respond, run_guarded
from dealership.core.context import RequestContext
from dealership.services import insights

router = APIRouter()

@router.post("/lead-scoring")
def score_leads(body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    """
    Score leads in bulk.

    Body ``{"lead_ids": [...]}`` scores those leads; an empty body scores every
    New and Contacted lead. Only leads visible to the caller are returned.
    """
    result = run_guarded(ctx, "VIEW_LEADS", lambda user: insights.score_leads(ctx, user, body))
    return respond(result, message="Lead scoring completed successfully")

@router.post("/engagement-recommendations")
def engagement_recommendations(body: Any = Body(None), ctx: RequestContext = Depends(get_request_context)):
    result = run_guarded(ctx, "VIEW_CUSTOMERS", lambda user: insights.engagement_recommendations(ctx, body))
    return respond(result, message="Engagement recommendations generated successfully")
