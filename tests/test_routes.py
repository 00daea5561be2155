import pytest
import requests

from storefront.models.cart import CartItem
from storefront.services import order_storage
from storefront.schemas.checkout_schemas import NormalizedOrder

TOWELS = {"_id": "towels", "nombre": "Toallas x12", "precio": 68000, "cantidadUnidades": 12}
ROBE = {"_id": "robe", "nombre": "Bata", "precio": 87000, "cantidadUnidades": 2}


def _fill_cart(session, *lines, session_id="sess-1"):
    for product_id, price, quantity, units in lines:
        session.add(CartItem(
            session_id=session_id,
            product_id=product_id,
            unit_price=price,
            quantity=quantity,
            units_per_item=units,
        ))
    session.commit()


def test_health(client, http, respond):
    http.request.return_value = respond(200, {})

    response = client.get("/health/check")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["database"] == "ok"
    assert body["order_service"] == "ok"
    assert http.request.call_args.args == ("GET", "http://orders.test")


@pytest.mark.parametrize("upstream, reported", [
    (requests.ConnectionError("refused"), "unreachable"),
    (requests.exceptions.ChunkedEncodingError("cut"), "unreachable"),
    (503, "unavailable"),
])
def test_health_reports_order_service_trouble(client, http, respond, upstream, reported):
    if isinstance(upstream, Exception):
        http.request.side_effect = upstream
    else:
        http.request.return_value = respond(upstream, {})

    body = client.get("/health/check").json()

    assert body["status"] == "degraded"
    assert body["order_service"] == reported
    assert body["database"] == "ok"


def test_session_header_required(client):
    response = client.get("/cart", headers={"X-Cart-Session": ""})
    assert response.status_code == 400


def test_add_uses_catalog_price_and_pack_size(client, http, respond):
    http.request.return_value = respond(200, TOWELS)

    response = client.post("/cart/add", json={"product_id": "towels", "quantity": 1})

    assert response.status_code == 200
    body = response.json()
    assert body["items"][0]["unit_price"] == 68000
    assert body["items"][0]["units"] == 12
    assert body["summary"]["free_shipping"] is True
    assert body["summary"]["total"] == 68000
    assert body["summary"]["display_total"] == "$68.000,00"


def test_adding_twice_merges_lines(client, http, respond):
    http.request.return_value = respond(200, ROBE)

    client.post("/cart/add", json={"product_id": "robe"})
    body = client.post("/cart/add", json={"product_id": "robe"}).json()

    assert len(body["items"]) == 1
    assert body["items"][0]["quantity"] == 2
    assert body["summary"]["total_units"] == 4
    assert body["summary"]["shipping"] == 0


def test_two_pack_pays_shipping(client, session):
    _fill_cart(session, ("robe", 87000, 1, 2))

    summary = client.get("/cart").json()["summary"]

    assert summary["total_units"] == 2
    assert summary["shipping"] == 12000
    assert summary["total"] == 99000


def test_update_and_remove(client, session):
    _fill_cart(session, ("robe", 87000, 1, 2), ("towels", 68000, 1, 12))

    body = client.put("/cart/update/robe", json={"quantity": 3}).json()
    assert {i["product_id"]: i["quantity"] for i in body["items"]} == {"robe": 3, "towels": 1}

    body = client.put("/cart/update/robe", json={"quantity": 0}).json()
    assert [i["product_id"] for i in body["items"]] == ["towels"]

    body = client.delete("/cart/remove/towels").json()
    assert body["items"] == []

    assert client.delete("/cart/remove/towels").status_code == 404
    assert client.put("/cart/update/ghost", json={"quantity": 1}).status_code == 404


def test_clear_cart(client, session):
    _fill_cart(session, ("robe", 87000, 1, 2))

    assert client.delete("/cart/clear").status_code == 200
    assert client.get("/cart").json()["items"] == []


def test_carts_are_per_session(client, session):
    _fill_cart(session, ("robe", 87000, 1, 2), session_id="someone-else")
    assert client.get("/cart").json()["items"] == []


def test_summary_with_surcharge_preview(client, session, fee_config):
    fee_config.mode = "pass_through"
    fee_config.percent = 0.06
    _fill_cart(session, ("gift", 88000, 1, 1))

    body = client.get("/checkout/summary").json()

    assert body["base_total"] == 100000
    assert body["surcharge"] == 6383
    assert body["surcharge_label"] == "Recargo Mercado Pago"


def test_summary_empty_cart(client):
    assert client.get("/checkout/summary").status_code == 400


def test_submit_success_clears_cart_and_stores_order(client, session, http, respond, valid_form):
    _fill_cart(session, ("robe", 87000, 1, 2))
    http.request.return_value = respond(201, {
        "orderId": "o-1",
        "orderNumber": "GAD-1",
        "totals": {"subtotal": 87000, "shippingCost": 12000, "total": 99000},
        "checkoutUrl": "https://mp.example/pay",
    })

    response = client.post("/checkout/submit", json=valid_form)

    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "success"
    assert body["order"]["order_id"] == "o-1"
    assert body["redirect_url"] == "https://mp.example/pay"

    assert client.get("/cart").json()["items"] == []

    current = client.get("/checkout/current-order").json()
    assert current["order"]["total"] == 99000
    assert current["status"] == "pending_payment"


def test_submit_timeout_keeps_cart(client, session, http, sleeps, valid_form):
    _fill_cart(session, ("robe", 87000, 1, 2))
    http.request.side_effect = requests.Timeout("slow")

    response = client.post("/checkout/submit", json=valid_form)

    assert response.status_code == 504
    assert response.json()["kind"] == "network_error"
    assert response.json()["retryable"] is True
    assert http.request.call_count == 1
    assert sleeps == []

    items = client.get("/cart").json()["items"]
    assert [i["product_id"] for i in items] == ["robe"]
    assert client.get("/checkout/current-order").status_code == 404


def test_submit_rejected_message_surfaced(client, session, http, respond, valid_form):
    _fill_cart(session, ("robe", 87000, 1, 2))
    http.request.return_value = respond(422, {"message": "Código postal fuera de zona"})

    response = client.post("/checkout/submit", json=valid_form)

    assert response.status_code == 422
    assert response.json()["error"] == "Código postal fuera de zona"
    assert len(client.get("/cart").json()["items"]) == 1


def test_submit_invalid_form(client, session, http, valid_form):
    _fill_cart(session, ("robe", 87000, 1, 2))

    response = client.post("/checkout/submit", json={**valid_form, "whatsapp": "123"})

    assert response.status_code == 422
    assert response.json()["kind"] == "validation_failed"
    assert "whatsapp" in response.json()["details"]["fields"]
    http.request.assert_not_called()


def test_submit_empty_cart(client, http, valid_form):
    response = client.post("/checkout/submit", json=valid_form)

    assert response.status_code == 400
    assert response.json()["kind"] == "empty_cart"
    http.request.assert_not_called()


def test_current_order_status_flow(client, session):
    order_storage.save_current_order(session, "sess-1", NormalizedOrder(order_id="o-1"))

    response = client.put("/checkout/current-order/status", json={"status": "approved"})
    assert response.status_code == 200
    assert response.json()["status"] == "approved"

    response = client.put("/checkout/current-order/status", json={"status": "pending_payment"})
    assert response.status_code == 409

    assert client.delete("/checkout/current-order").status_code == 200
    assert client.get("/checkout/current-order").status_code == 404


def test_fetching_current_order_refreshes_stored_copy(client, session, http, respond):
    order_storage.save_current_order(session, "sess-1", NormalizedOrder(order_id="o-1"))
    http.request.return_value = respond(200, {"ordenId": "o-1", "estado": "approved", "total": 99000})

    response = client.get("/checkout/orders/o-1")

    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    assert client.get("/checkout/current-order").json()["status"] == "approved"


def test_products_proxy(client, http, respond):
    http.request.return_value = respond(200, [TOWELS, ROBE])

    response = client.get("/products", params={"page": 2})

    assert response.status_code == 200
    assert len(response.json()) == 2
    assert http.request.call_args.kwargs["params"] == {"page": 2}


def test_products_upstream_down(client, http, respond, sleeps):
    http.request.return_value = respond(503, {})

    response = client.get("/products")

    assert response.status_code == 503
    assert response.json()["kind"] == "server_unavailable"
    assert sleeps == [1.0, 2.0, 4.0]


def test_zero_pack_size_from_catalog_counts_as_one(client, http, respond):
    http.request.return_value = respond(200, {**ROBE, "cantidadUnidades": 0})

    body = client.post("/cart/add", json={"product_id": "robe"}).json()

    assert body["items"][0]["units_per_item"] == 1
    assert body["summary"]["total_units"] == 1
    assert body["summary"]["shipping"] == 12000


def test_two_carts_add_the_same_product(client, http, respond, catalog_client):
    http.request.return_value = respond(200, TOWELS)

    first = client.post("/cart/add", json={"product_id": "towels"})
    second = client.post(
        "/cart/add", json={"product_id": "towels"}, headers={"X-Cart-Session": "sess-2"}
    )

    assert first.status_code == second.status_code == 200
    assert second.json()["items"][0]["quantity"] == 1
    assert len(catalog_client.tracker) == 0


def test_broken_connection_on_submit_keeps_cart(client, session, http, valid_form):
    _fill_cart(session, ("robe", 87000, 1, 2))
    http.request.side_effect = requests.exceptions.ChunkedEncodingError("connection cut")

    response = client.post("/checkout/submit", json=valid_form)

    assert response.status_code == 504
    assert response.json()["kind"] == "network_error"
    assert http.request.call_count == 1
    assert len(client.get("/cart").json()["items"]) == 1


def test_negative_pack_size_from_catalog_rejected(client, http, respond):
    http.request.return_value = respond(200, {**ROBE, "cantidadUnidades": -5})

    response = client.post("/cart/add", json={"product_id": "robe"})

    assert response.status_code == 422
    assert response.json()["kind"] == "invalid_line_item"
    assert client.get("/cart").json()["items"] == []
