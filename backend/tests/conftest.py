from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from backend.app.db.base import Base
from backend.app.db.models.models_v1 import Order, Product, Warehouse

PROCEDURE_NAME = "AddProductToWarehouse"


@pytest.fixture(scope="function")
def make_engine():
    """
    Fabrique de base SQLite en mémoire, une par test.

    `procedure` (optionnel) est enregistrée comme fonction SQL et joue le rôle
    de la procédure stockée : SELECT AddProductToWarehouse(?, ?, ?, ?).
    """
    engines = []

    def _make(procedure=None):
        engine = create_engine(
            "sqlite+pysqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        if procedure is not None:

            @event.listens_for(engine, "connect")
            def register_procedure(dbapi_connection, connection_record):
                dbapi_connection.create_function(PROCEDURE_NAME, 4, procedure)

        Base.metadata.create_all(bind=engine)
        engines.append(engine)
        return engine

    yield _make

    for engine in engines:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def engine(make_engine):
    return make_engine()


@pytest.fixture(scope="function")
def db_session(engine):
    session = Session(bind=engine)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def scenario(db_session):
    """
    Commande 10 ouverte (produit 5, quantité 3, 2024-01-01),
    produit 5 à 2.50, entrepôt 7.
    """
    db_session.add(Product(id=5, name="Riz", description="", price=Decimal("2.50")))
    db_session.add(Warehouse(id=7, name="TAH-DOCK", address=""))
    db_session.flush()
    db_session.add(Order(id=10, product_id=5, amount=3, created_at=datetime(2024, 1, 1)))
    db_session.commit()
    return db_session
