from __future__ import annotations

from typing import Generator

from backend.app.db.session import SessionLocal, engine, settings
from backend.services.fulfillment import OrderFulfillmentWriter


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_fulfillment_writer() -> OrderFulfillmentWriter:
    return OrderFulfillmentWriter(engine, procedure_name=settings.fulfillment_procedure)
