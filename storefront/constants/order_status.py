PENDING_PAYMENT = "pending_payment"

ALLOWED_TRANSITIONS = {
    "pending": ["pending_payment", "approved", "rejected", "cancelled"],
    "pending_payment": ["approved", "rejected", "cancelled"],
    "rejected": ["pending_payment", "cancelled"],
    "approved": ["refunded"],
    "cancelled": [],
    "refunded": []
}


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, [])
