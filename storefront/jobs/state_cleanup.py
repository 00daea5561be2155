import logging
from sqlmodel import Session

from storefront.config import settings
from storefront.database import engine
from storefront.services.order_storage import purge_expired_state

logger = logging.getLogger(__name__)


def purge_expired_orders():
    with Session(engine) as session:
        removed = purge_expired_state(session, expiry_days=settings.order_expiry_days)

    logger.info(f"Purged {removed} expired order records")
    return removed


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level)
    purge_expired_orders()
