from storefront.models.cart import CartItem
from storefront.models.persisted_state import PersistedState

__all__ = ["CartItem", "PersistedState"]
