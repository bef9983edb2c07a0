from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db, get_fulfillment_writer
from backend.app.db.models.models_v1 import Order, ProductWarehouse
from backend.app.main import app
from backend.services.fulfillment import OrderFulfillmentWriter

PAYLOAD = {
    "id_product": 5,
    "id_warehouse": 7,
    "amount": 3,
    "created_at": "2024-01-02T00:00:00",
}


@pytest.fixture
def client_for():
    def _client(engine):
        def override_db():
            db = Session(bind=engine)
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_db
        app.dependency_overrides[get_fulfillment_writer] = lambda: OrderFulfillmentWriter(engine)
        return TestClient(app)

    yield _client
    app.dependency_overrides.clear()


def test_health(client_for, engine):
    r = client_for(engine).get("/v1/health")

    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_add_product_returns_new_id(client_for, engine, scenario):
    r = client_for(engine).post("/v1/warehouses", json=PAYLOAD)

    assert r.status_code == 200
    new_id = r.json()["id"]

    row = scenario.get(ProductWarehouse, new_id)
    assert row.price == Decimal("7.50")
    scenario.expire_all()
    assert scenario.get(Order, 10).fulfilled_at == datetime(2024, 1, 2)


@pytest.mark.parametrize(
    "overrides, status, detail",
    [
        ({"amount": 9}, 404, "No open order matches this product, amount and date"),
        ({"id_warehouse": 8}, 404, "Warehouse not found"),
    ],
)
def test_add_product_client_errors(client_for, engine, scenario, overrides, status, detail):
    r = client_for(engine).post("/v1/warehouses", json={**PAYLOAD, **overrides})

    assert r.status_code == status
    assert r.json()["detail"] == detail


def test_add_product_twice_is_rejected(client_for, engine, scenario):
    client = client_for(engine)
    assert client.post("/v1/warehouses", json=PAYLOAD).status_code == 200

    r = client.post("/v1/warehouses", json=PAYLOAD)
    assert r.status_code == 404


def test_add_product_validates_payload(client_for, engine):
    r = client_for(engine).post("/v1/warehouses", json={**PAYLOAD, "amount": 0})

    assert r.status_code == 422


def test_add_product_unexpected_error_is_500(client_for, engine, scenario, monkeypatch):
    from backend.services import fulfillment

    def broken_insert(db, request, *, order_id, unit_price):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(fulfillment, "insert_fulfillment", broken_insert)

    r = client_for(engine).post("/v1/warehouses", json=PAYLOAD)

    assert r.status_code == 500
    assert r.json()["detail"] == "connection lost"


def test_procedure_returns_id(client_for, make_engine):
    engine = make_engine(lambda *args: 31)

    r = client_for(engine).post("/v1/warehouses/procedure", json=PAYLOAD)

    assert r.status_code == 200
    assert r.json() == {"id": 31}


def test_procedure_zero_is_bad_request(client_for, make_engine):
    engine = make_engine(lambda *args: 0)

    r = client_for(engine).post("/v1/warehouses/procedure", json=PAYLOAD)

    assert r.status_code == 400
    assert r.json()["detail"] == "Failed to add"


def test_procedure_failure_is_server_error(client_for, make_engine):
    def procedure(*args):
        raise RuntimeError("boom")

    engine = make_engine(procedure)

    r = client_for(engine).post("/v1/warehouses/procedure", json=PAYLOAD)

    assert r.status_code == 500
    assert r.json()["detail"] == "Product could not be added to the warehouse"


def test_add_product_accepts_camel_case_payload(client_for, engine, scenario):
    payload = {
        "idProduct": 5,
        "idWarehouse": 7,
        "amount": 3,
        "createdAt": "2024-01-02T00:00:00",
    }

    r = client_for(engine).post("/v1/warehouses", json=payload)

    assert r.status_code == 200
    assert scenario.get(ProductWarehouse, r.json()["id"]).order_id == 10


def test_run_serves_app_with_uvicorn(monkeypatch):
    from backend.app import main

    calls = []
    monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    main.run()

    assert calls == [(main.app, {"host": main.settings.api_host, "port": main.settings.api_port})]
