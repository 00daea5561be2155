from unittest.mock import Mock

import pytest
import requests
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from storefront.database import get_session
from storefront.dependencies.clients import get_catalog_client, get_fee_config, get_order_client
from storefront.main import app
from storefront.models import CartItem, PersistedState  # noqa: F401  registers tables
from storefront.schemas.pricing_schemas import FeeConfig
from storefront.services.catalog_client import CatalogClient
from storefront.services.order_client import OrderServiceClient
from storefront.utils.cache_helpers import TTLCache


def make_response(status_code=200, body=None):
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    if body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def respond():
    return make_response


@pytest.fixture
def http():
    """Stand-in for requests.Session; set ``http.request.side_effect`` / ``return_value``."""
    return Mock(spec=requests.Session)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def order_client(http, sleeps):
    return OrderServiceClient("http://orders.test", http=http, sleep=sleeps.append)


@pytest.fixture
def catalog_client(http, sleeps):
    return CatalogClient("http://catalog.test", http=http, cache=TTLCache(), sleep=sleeps.append)


@pytest.fixture
def fee_config():
    return FeeConfig(mode="absorb")


@pytest.fixture
def client(session, order_client, catalog_client, fee_config):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_order_client] = lambda: order_client
    app.dependency_overrides[get_catalog_client] = lambda: catalog_client
    app.dependency_overrides[get_fee_config] = lambda: fee_config

    yield TestClient(app, headers={"X-Cart-Session": "sess-1"})

    app.dependency_overrides.clear()


@pytest.fixture
def valid_form():
    return {
        "nombre": "María Pérez",
        "email": "Maria@Example.com ",
        "whatsapp": "11 2345 6789",
        "domicilio": "Av. Siempre Viva 742",
        "localidad": "Rosario",
        "provincia": "Santa Fe",
        "codigoPostal": "S2000",
        "notasAdicionales": "Bordar iniciales",
    }
