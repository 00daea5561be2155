import time
import logging
from typing import Callable, Optional

import requests

from storefront.schemas.checkout_schemas import CheckoutRequest, NormalizedOrder
from storefront.services.checkout_normalizer import from_checkout_response
from storefront.utils.retry import fetch_with_retry, send_once

logger = logging.getLogger(__name__)

CREATE_ORDER_PATH = "/api/pedidos/crear"


class OrderServiceClient:
    """
    HTTP client for the external order service.

    Writes (create_order, retry_payment) are sent exactly once: a failed
    submit must be re-sent by the shopper, never by us, or we risk duplicate
    orders. Reads (get_order) go through the retrying fetch.
    """

    def __init__(
        self,
        base_url: str,
        http: Optional[requests.Session] = None,
        write_timeout: float = 15,
        read_timeout: float = 10,
        max_retries: int = 3,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.http = http or requests.Session()
        self.write_timeout = write_timeout
        self.read_timeout = read_timeout
        self.max_retries = max_retries
        self.sleep = sleep

    def create_order(self, request: CheckoutRequest) -> NormalizedOrder:
        payload = request.to_wire()
        logger.info(
            f"Creating order: {len(request.line_items)} lines, "
            f"{request.total_units} units, ref {request.snapshot.client_reference}"
        )

        body = send_once(
            self.http,
            "POST",
            f"{self.base_url}{CREATE_ORDER_PATH}",
            json=payload,
            headers={"Accept": "application/json"},
            timeout=self.write_timeout,
        )

        order = from_checkout_response(body)
        logger.info(f"Order {order.order_id} created ({order.status})")
        return order

    def get_order(self, order_id: str) -> NormalizedOrder:
        body = fetch_with_retry(
            self.http,
            f"{self.base_url}/api/orders/{order_id}",
            timeout=self.read_timeout,
            max_retries=self.max_retries,
            sleep=self.sleep,
        )
        return from_checkout_response(body)

    def retry_payment(self, order_id: str) -> NormalizedOrder:
        body = send_once(
            self.http,
            "POST",
            f"{self.base_url}/api/orders/{order_id}/retry",
            headers={"Accept": "application/json"},
            timeout=self.read_timeout,
        )
        return from_checkout_response(body)

    def ping(self, timeout: float = 3) -> str:
        """Reachability for health checks: ``ok``, ``unavailable`` (5xx, e.g. a cold start) or ``unreachable``."""
        try:
            response = self.http.request("GET", self.base_url, timeout=timeout)
        except requests.RequestException as e:
            logger.warning(f"Order service unreachable: {type(e).__name__}")
            return "unreachable"

        return "unavailable" if response.status_code >= 500 else "ok"
