"""
Réception d'un produit en entrepôt contre une commande (Order) existante.

Deux chemins :
- record_fulfillment : orchestration applicative (3 lectures, 1 update, 1 insert)
  dans une seule transaction.
- record_fulfillment_via_procedure : délègue tout à la procédure stockée.
"""

from __future__ import annotations

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation

import structlog
from sqlalchemy import DateTime, Integer, bindparam, insert, select, text, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from backend.app.core.config import DEFAULT_FULFILLMENT_PROCEDURE
from backend.app.db.models.models_v1 import Order, Product, ProductWarehouse, Warehouse
from backend.app.schemas.product_warehouse import FulfillmentRequest
from backend.services.exceptions import (
    FulfillmentError,
    InsertFailed,
    OrderNotFound,
    ProductPriceNotFound,
    UpdateFailed,
    WarehouseNotFound,
)

logger = structlog.get_logger(__name__)

_PROCEDURE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


def find_open_order_id(db: Session, request: FulfillmentRequest) -> int:
    """
    Retourne la commande ouverte la plus récente qui correspond à la réception.

    Critères : même produit, même quantité, créée strictement avant la
    réception, FulfilledAt vide et aucune ligne Product_Warehouse associée.
    Départage : CreatedAt le plus récent, puis IdOrder le plus grand.
    """
    order_id = (
        db.execute(
            select(Order.id)
            .outerjoin(ProductWarehouse, ProductWarehouse.order_id == Order.id)
            .where(Order.product_id == request.id_product)
            .where(Order.amount == request.amount)
            .where(Order.created_at < request.created_at)
            .where(Order.fulfilled_at.is_(None))
            .where(ProductWarehouse.id.is_(None))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(1)
        )
        .scalars()
        .first()
    )
    if order_id is None:
        raise OrderNotFound()
    return int(order_id)


def get_product_price(db: Session, product_id: int) -> Decimal:
    price = db.execute(select(Product.price).where(Product.id == product_id)).scalar_one_or_none()
    if price is None:
        raise ProductPriceNotFound()
    return Decimal(price)


def ensure_warehouse_exists(db: Session, warehouse_id: int) -> None:
    found = db.execute(select(Warehouse.id).where(Warehouse.id == warehouse_id)).scalar_one_or_none()
    if found is None:
        raise WarehouseNotFound()


def mark_order_fulfilled(db: Session, order_id: int, fulfilled_at: datetime) -> None:
    # garde FulfilledAt IS NULL : deux réceptions concurrentes ne peuvent pas
    # marquer la même commande
    result = db.execute(
        update(Order)
        .where(Order.id == order_id)
        .where(Order.fulfilled_at.is_(None))
        .values(fulfilled_at=fulfilled_at)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise UpdateFailed()


def insert_fulfillment(
    db: Session,
    request: FulfillmentRequest,
    *,
    order_id: int,
    unit_price: Decimal,
) -> int:
    """Insère la ligne Product_Warehouse et retourne l'id généré (RETURNING)."""
    new_id = db.execute(
        insert(ProductWarehouse)
        .values(
            warehouse_id=request.id_warehouse,
            product_id=request.id_product,
            order_id=order_id,
            amount=request.amount,
            price=Decimal(request.amount) * unit_price,
            created_at=request.created_at,
        )
        .returning(ProductWarehouse.id)
    ).scalar_one_or_none()
    if new_id is None:
        raise InsertFailed()
    return int(new_id)


def as_identifier(value: object) -> int:
    """
    Convertit le retour de la procédure en id.

    0 est rendu tel quel (la couche API le traite comme "non ajouté").
    None, booléen, texte non numérique, décimal ou négatif -> InsertFailed.
    """
    if value is None or isinstance(value, bool):
        raise InsertFailed("Procedure returned no usable id")
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise InsertFailed(f"Procedure returned a non-numeric id: {value!r}") from None
    if not number.is_finite() or number != number.to_integral_value() or number < 0:
        raise InsertFailed(f"Procedure returned an invalid id: {value!r}")
    return int(number)


class OrderFulfillmentWriter:
    def __init__(self, engine: Engine, *, procedure_name: str = DEFAULT_FULFILLMENT_PROCEDURE):
        if not _PROCEDURE_NAME.match(procedure_name):
            raise ValueError(f"Invalid stored procedure name: {procedure_name!r}")
        self.engine = engine
        self.procedure_name = procedure_name
        self._session_factory = sessionmaker(bind=engine, autoflush=False)

    def record_fulfillment(self, request: FulfillmentRequest) -> int:
        log = logger.bind(
            product_id=request.id_product,
            warehouse_id=request.id_warehouse,
            amount=request.amount,
        )

        with self._session_factory() as db:
            try:
                # ---------- CONTRÔLES (lecture seule) ----------
                order_id = find_open_order_id(db, request)
                unit_price = get_product_price(db, request.id_product)
                ensure_warehouse_exists(db, request.id_warehouse)

                # ---------- ÉCRITURES (même transaction) ----------
                mark_order_fulfilled(db, order_id, request.created_at)
                fulfillment_id = insert_fulfillment(
                    db,
                    request,
                    order_id=order_id,
                    unit_price=unit_price,
                )

                db.commit()
            except FulfillmentError as exc:
                db.rollback()
                log.warning("Fulfillment rejected", error=type(exc).__name__, reason=exc.message)
                raise
            except Exception:
                db.rollback()
                log.exception("Fulfillment failed, transaction rolled back")
                raise

        log.info("Fulfillment recorded", order_id=order_id, fulfillment_id=fulfillment_id)
        return fulfillment_id

    def _procedure_statement(self):
        if self.engine.dialect.name == "mssql":
            sql = (
                f"EXEC {self.procedure_name} "
                "@IdProduct = :id_product, @IdWarehouse = :id_warehouse, "
                "@Amount = :amount, @CreatedAt = :created_at"
            )
        else:
            sql = f"SELECT {self.procedure_name}(:id_product, :id_warehouse, :amount, :created_at)"

        return text(sql).bindparams(
            bindparam("id_product", type_=Integer),
            bindparam("id_warehouse", type_=Integer),
            bindparam("amount", type_=Integer),
            bindparam("created_at", type_=DateTime),
        )

    def record_fulfillment_via_procedure(self, request: FulfillmentRequest) -> int:
        log = logger.bind(
            procedure=self.procedure_name,
            product_id=request.id_product,
            warehouse_id=request.id_warehouse,
            amount=request.amount,
        )
        params = {
            "id_product": request.id_product,
            "id_warehouse": request.id_warehouse,
            "amount": request.amount,
            "created_at": request.created_at,
        }

        with self._session_factory() as db:
            try:
                value = db.execute(self._procedure_statement(), params).scalar()
                # id inutilisable -> rollback, rien n'est validé
                fulfillment_id = as_identifier(value)
                db.commit()
            except InsertFailed as exc:
                db.rollback()
                log.error("Stored procedure returned an unusable id", reason=exc.message)
                raise
            except SQLAlchemyError as exc:
                db.rollback()
                log.error("Stored procedure failed", error=str(exc))
                raise InsertFailed() from exc

        log.info("Stored procedure returned", fulfillment_id=fulfillment_id)
        return fulfillment_id
