import pytest
import requests

from storefront.exceptions import (
    ErrorKind,
    MalformedResponse,
    NetworkError,
    ServerRejected,
    ServerUnavailable,
)
from storefront.schemas.pricing_schemas import LineItem
from storefront.services.checkout_normalizer import to_checkout_request


@pytest.fixture
def checkout_request(valid_form):
    return to_checkout_request([LineItem(id="p1", unit_price=87000, units_per_item=2)], valid_form)


def test_create_order_posts_once_with_timeout(order_client, http, respond, checkout_request):
    http.request.return_value = respond(201, {"orderId": "o-1", "totals": {"total": 99000}})

    order = order_client.create_order(checkout_request)

    assert order.order_id == "o-1"
    assert order.total == 99000

    http.request.assert_called_once()
    args, kwargs = http.request.call_args
    assert args == ("POST", "http://orders.test/api/pedidos/crear")
    assert kwargs["timeout"] == 15
    assert kwargs["json"]["lineItems"] == [{"productId": "p1", "quantity": 1}]
    assert kwargs["json"]["totals"]["total"] == 99000


@pytest.mark.parametrize("exc", [requests.Timeout("slow"), requests.ConnectionError("down")])
def test_network_failures_are_not_retried(order_client, http, sleeps, checkout_request, exc):
    http.request.side_effect = exc

    with pytest.raises(NetworkError) as info:
        order_client.create_order(checkout_request)

    assert info.value.retryable
    assert http.request.call_count == 1
    assert sleeps == []


def test_cold_start_on_submit_is_not_retried(order_client, http, respond, sleeps, checkout_request):
    http.request.return_value = respond(503, {"error": "starting"})

    with pytest.raises(ServerUnavailable):
        order_client.create_order(checkout_request)

    assert http.request.call_count == 1
    assert sleeps == []


@pytest.mark.parametrize("body, message", [
    ({"error": "Producto sin stock"}, "Producto sin stock"),
    ({"message": "Datos inválidos"}, "Datos inválidos"),
    ({}, "Error 400"),
    (None, "Error 400"),
])
def test_rejection_message_surfaced(order_client, http, respond, checkout_request, body, message):
    http.request.return_value = respond(400, body)

    with pytest.raises(ServerRejected) as info:
        order_client.create_order(checkout_request)

    assert info.value.message == message
    assert info.value.status_code == 400
    assert info.value.kind == ErrorKind.SERVER_REJECTED
    assert not info.value.retryable


def test_server_error_maps_to_bad_gateway(order_client, http, respond, checkout_request):
    http.request.return_value = respond(500, {"error": "boom"})

    with pytest.raises(ServerRejected) as info:
        order_client.create_order(checkout_request)

    assert info.value.status_code == 502
    assert info.value.upstream_status == 500


def test_success_without_identifier_is_malformed(order_client, http, respond, checkout_request):
    http.request.return_value = respond(200, {"ok": True, "total": 99000})

    with pytest.raises(MalformedResponse):
        order_client.create_order(checkout_request)


def test_success_with_non_json_body_is_malformed(order_client, http, respond, checkout_request):
    http.request.return_value = respond(200, None)

    with pytest.raises(MalformedResponse):
        order_client.create_order(checkout_request)


def test_get_order_retries_transient_failures(order_client, http, respond, sleeps):
    http.request.side_effect = [
        requests.Timeout("slow"),
        respond(503, {}),
        respond(200, {"ordenId": "o-9", "orderStatus": "approved"}),
    ]

    order = order_client.get_order("o-9")

    assert order.status == "approved"
    assert http.request.call_count == 3
    assert sleeps == [1.0, 2.0]
    assert http.request.call_args[0] == ("GET", "http://orders.test/api/orders/o-9")


def test_get_order_not_found(order_client, http, respond, sleeps):
    http.request.return_value = respond(404, {"error": "Orden no encontrada"})

    with pytest.raises(ServerRejected) as info:
        order_client.get_order("missing")

    assert info.value.status_code == 404
    assert http.request.call_count == 1
    assert sleeps == []


def test_retry_payment_posts_once(order_client, http, respond):
    http.request.return_value = respond(200, {
        "orderId": "o-1",
        "checkoutUrl": "https://mp.example/new",
    })

    order = order_client.retry_payment("o-1")

    assert order.checkout_url == "https://mp.example/new"
    args, kwargs = http.request.call_args
    assert args == ("POST", "http://orders.test/api/orders/o-1/retry")
    assert kwargs["timeout"] == 10


def test_get_order_retries_broken_transfers(order_client, http, respond, sleeps):
    http.request.side_effect = [
        requests.exceptions.ChunkedEncodingError("truncated"),
        respond(200, {"orderId": "o-9"}),
    ]

    assert order_client.get_order("o-9").order_id == "o-9"
    assert sleeps == [1.0]


@pytest.mark.parametrize("exc", [
    requests.exceptions.TooManyRedirects("loop"),
    requests.exceptions.InvalidURL("bad"),
    requests.exceptions.ContentDecodingError("gzip"),
])
def test_any_transport_failure_is_a_network_error(order_client, http, checkout_request, exc):
    http.request.side_effect = exc

    with pytest.raises(NetworkError) as info:
        order_client.create_order(checkout_request)

    assert info.value.details["reason"] == type(exc).__name__
    assert http.request.call_count == 1
