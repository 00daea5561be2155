"""
The shopper's "current order": one versioned record per cart session.

Replaces the scattered per-field keys older clients wrote (``lastOrder``,
``lastOrderStatus``, ...). Those are purged once, at startup, by
migrate_legacy_state().
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete
from sqlmodel import Session, col, select

from storefront.constants.order_status import PENDING_PAYMENT, can_transition
from storefront.exceptions import InvalidTransition
from storefront.models.persisted_state import PersistedState
from storefront.schemas.checkout_schemas import CurrentOrderRecord, NormalizedOrder

logger = logging.getLogger(__name__)

ORDER_STATE_KEY = "current_order"
STATE_VERSION = 1
ORDER_EXPIRY_DAYS = 7

MIGRATION_SESSION = "_system"
MIGRATION_KEY = "legacy_keys_purged"

LEGACY_KEYS = [
    "lastOrder",
    "lastOrderStatus",
    "lastOrderData",
    "lastOrderTotal",
    "lastOrderNumber",
    "lastOrderShipping",
    "currentOrder",
]


def _record(session: Session, session_id: str) -> Optional[PersistedState]:
    return session.exec(
        select(PersistedState).where(
            PersistedState.session_id == session_id,
            PersistedState.key == ORDER_STATE_KEY,
        )
    ).first()


def is_expired(
    saved_at: datetime,
    now: Optional[datetime] = None,
    expiry_days: int = ORDER_EXPIRY_DAYS,
) -> bool:
    now = now or datetime.utcnow()
    return now - saved_at > timedelta(days=expiry_days)


def save_current_order(
    session: Session,
    session_id: str,
    order: NormalizedOrder,
    status: str = PENDING_PAYMENT,
) -> CurrentOrderRecord:
    now = datetime.utcnow()
    payload = {
        "order": order.model_dump(mode="json"),
        "status": status,
        "timestamp": now.isoformat(),
        "order_number": order.order_number or order.order_id,
    }

    # Last write wins
    row = _record(session, session_id) or PersistedState(
        session_id=session_id, key=ORDER_STATE_KEY
    )
    row.version = STATE_VERSION
    row.payload = payload
    row.saved_at = now

    session.add(row)
    session.commit()

    logger.info(f"Saved order {order.order_id} for session {session_id} ({status})")
    return CurrentOrderRecord.model_validate(payload)


def load_current_order(
    session: Session,
    session_id: str,
    now: Optional[datetime] = None,
    expiry_days: int = ORDER_EXPIRY_DAYS,
) -> Optional[CurrentOrderRecord]:
    """The stored order, or None. Expired and outdated records are deleted, never returned."""
    row = _record(session, session_id)
    if row is None:
        return None

    if row.version != STATE_VERSION or is_expired(row.saved_at, now, expiry_days):
        logger.info(f"Dropping stale order record for session {session_id}")
        session.delete(row)
        session.commit()
        return None

    return CurrentOrderRecord.model_validate(row.payload)


def update_order_status(
    session: Session,
    session_id: str,
    new_status: str,
    now: Optional[datetime] = None,
) -> Optional[CurrentOrderRecord]:
    record = load_current_order(session, session_id, now)
    if record is None:
        return None

    if record.status == new_status:
        return record

    if not can_transition(record.status, new_status):
        raise InvalidTransition(
            f"Cannot move order from {record.status} to {new_status}",
            details={"current": record.status, "requested": new_status},
        )

    row = _record(session, session_id)
    payload = dict(row.payload)
    payload["status"] = new_status
    payload["order"] = {**payload["order"], "status": new_status}
    row.payload = payload

    session.add(row)
    session.commit()

    logger.info(f"Order {record.order.order_id}: {record.status} -> {new_status}")
    return CurrentOrderRecord.model_validate(payload)


def clear_current_order(session: Session, session_id: str) -> bool:
    row = _record(session, session_id)
    if row is None:
        return False

    session.delete(row)
    session.commit()
    return True


def purge_expired_state(
    session: Session,
    now: Optional[datetime] = None,
    expiry_days: int = ORDER_EXPIRY_DAYS,
) -> int:
    cutoff = (now or datetime.utcnow()) - timedelta(days=expiry_days)

    rows = session.exec(
        select(PersistedState)
        .where(PersistedState.key == ORDER_STATE_KEY)
        .where(PersistedState.saved_at < cutoff)
    ).all()

    for row in rows:
        session.delete(row)

    session.commit()
    return len(rows)


def migrate_legacy_state(session: Session) -> int:
    """Delete legacy per-field records. Runs once; later calls are no-ops."""
    marker = session.exec(
        select(PersistedState).where(
            PersistedState.session_id == MIGRATION_SESSION,
            PersistedState.key == MIGRATION_KEY,
        )
    ).first()
    if marker:
        return 0

    result = session.execute(
        delete(PersistedState).where(col(PersistedState.key).in_(LEGACY_KEYS))
    )
    removed = result.rowcount or 0

    session.add(
        PersistedState(
            session_id=MIGRATION_SESSION,
            key=MIGRATION_KEY,
            version=STATE_VERSION,
            payload={"removed": removed},
        )
    )
    session.commit()

    logger.info(f"Purged {removed} legacy order records")
    return removed
