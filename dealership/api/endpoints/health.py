import logging

from fastapi import APIRouter, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("")
def health_check(request: Request):
    """
    Health check endpoint that verifies API and database status.

    Returns:
        dict: Health status of the API and database
    """
    health_status = {
        "status": "healthy",
        "api": "online",
        "database": "online",
    }

    # Check database connection
    try:
        with request.app.state.database.session() as session:
            session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.exception(f"Health check could not reach the database: {e}")
        health_status["database"] = "offline"
        health_status["status"] = "unhealthy"

    return health_status
