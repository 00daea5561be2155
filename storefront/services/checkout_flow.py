"""
Checkout submission state machine.

    idle -> validating -> submitting -> success | failed
    success | failed -> validating   (the shopper submits again)

One submit() is one HTTP attempt. Nothing here retries a failed submit: the
order endpoint is not idempotent, so only the shopper may send it again. The
cart is cleared only once an order identifier has come back and the order
record has been stored.
"""
import logging
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from storefront.exceptions import (
    EmptyCart,
    InvalidTransition,
    StorefrontError,
    ValidationFailed,
)
from storefront.schemas.checkout_schemas import CustomerForm, NormalizedOrder
from storefront.schemas.pricing_schemas import FeeConfig, LineItem
from storefront.services.checkout_normalizer import to_checkout_request
from storefront.services.form_validator import format_form, validate_form
from storefront.services.order_client import OrderServiceClient
from storefront.services.order_totals import compute_order_totals

logger = logging.getLogger(__name__)


class CheckoutState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


TRANSITIONS = {
    CheckoutState.IDLE: {CheckoutState.VALIDATING},
    CheckoutState.VALIDATING: {CheckoutState.SUBMITTING, CheckoutState.FAILED},
    CheckoutState.SUBMITTING: {CheckoutState.SUCCESS, CheckoutState.FAILED},
    CheckoutState.SUCCESS: {CheckoutState.VALIDATING},
    CheckoutState.FAILED: {CheckoutState.VALIDATING},
}


class CheckoutSubmission:
    def __init__(
        self,
        order_client: OrderServiceClient,
        fee_config: Optional[FeeConfig] = None,
        remember_order: Callable[[NormalizedOrder], Any] = lambda order: None,
        clear_cart: Callable[[], Any] = lambda: None,
    ):
        self.order_client = order_client
        self.fee_config = fee_config or FeeConfig()
        self.remember_order = remember_order
        self.clear_cart = clear_cart

        self.state = CheckoutState.IDLE
        self.order: Optional[NormalizedOrder] = None
        self.error: Optional[StorefrontError] = None

    def _move(self, new_state: CheckoutState) -> None:
        if new_state not in TRANSITIONS[self.state]:
            raise InvalidTransition(
                f"Checkout cannot go from {self.state.value} to {new_state.value}"
            )
        logger.debug(f"Checkout {self.state.value} -> {new_state.value}")
        self.state = new_state

    def _fail(self, error: StorefrontError) -> StorefrontError:
        self._move(CheckoutState.FAILED)
        self.error = error
        return error

    def submit(
        self,
        line_items: Iterable[Union[LineItem, Mapping[str, Any]]],
        form: Union[CustomerForm, Mapping[str, Any]],
    ) -> NormalizedOrder:
        """Run one submission. Returns the created order or raises the error that failed it."""
        self._move(CheckoutState.VALIDATING)
        self.order = None
        self.error = None

        items = list(line_items)
        if not isinstance(form, CustomerForm):
            form = CustomerForm.model_validate(form)
        formatted = format_form(form.model_dump(by_alias=True))

        is_valid, errors = validate_form(formatted)
        if not is_valid:
            logger.warning(f"Checkout validation failed: {sorted(errors)}")
            raise self._fail(
                ValidationFailed("Please complete every field correctly", errors)
            )

        if not items:
            raise self._fail(EmptyCart("Your cart is empty"))

        try:
            totals = compute_order_totals(items, self.fee_config)
            request = to_checkout_request(
                items, CustomerForm.model_validate(formatted), totals=totals
            )
        except StorefrontError as e:
            raise self._fail(e)

        self._move(CheckoutState.SUBMITTING)

        try:
            order = self.order_client.create_order(request)
        except StorefrontError as e:
            logger.error(f"Checkout failed ({e.kind.value}): {e.message}")
            raise self._fail(e)
        except Exception:
            logger.exception("Checkout failed with an unexpected error")
            self._move(CheckoutState.FAILED)
            raise

        # The order exists upstream from here on. Local bookkeeping failures
        # must not turn it into a failed checkout the shopper would resubmit.
        try:
            self.remember_order(order)
        except Exception:
            logger.exception(f"Could not store order {order.order_id}, keeping the cart")
        else:
            try:
                self.clear_cart()
            except Exception:
                logger.exception(f"Could not clear the cart after order {order.order_id}")

        self._move(CheckoutState.SUCCESS)
        self.order = order
        return order
