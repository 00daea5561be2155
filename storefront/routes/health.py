import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, text

from storefront.database import get_session
from storefront.dependencies.clients import get_order_client
from storefront.services.order_client import OrderServiceClient

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/check")
def health_check(
    session: Session = Depends(get_session),
    order_client: OrderServiceClient = Depends(get_order_client),
):
    try:
        session.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        database = "failed"

    # Checkout depends on it, so a sleeping order service degrades us too
    order_service = order_client.ping()

    healthy = database == "ok" and order_service == "ok"
    return {
        "status": "ok" if healthy else "degraded",
        "database": database,
        "order_service": order_service,
        "timestamp": datetime.utcnow().isoformat(),
    }
