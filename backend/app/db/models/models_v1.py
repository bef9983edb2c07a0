from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String,
    Integer,
    DateTime,
    ForeignKey,
    Numeric,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column

from backend.app.db.base import Base

# Le schéma appartient à la base existante : noms de tables / colonnes
# repris tels quels, attributs Python en snake_case.


# ---------- MASTER DATA ----------
class Product(Base):
    __tablename__ = "Product"
    id: Mapped[int] = mapped_column("IdProduct", Integer, primary_key=True)
    name: Mapped[str] = mapped_column("Name", String(200), nullable=False)
    description: Mapped[str] = mapped_column("Description", String(200), default="", nullable=False)
    price: Mapped[Decimal] = mapped_column("Price", Numeric(25, 2), nullable=False)

    __table_args__ = (CheckConstraint('"Price" >= 0', name="ck_product_price_nonneg"),)


class Warehouse(Base):
    __tablename__ = "Warehouse"
    id: Mapped[int] = mapped_column("IdWarehouse", Integer, primary_key=True)
    name: Mapped[str] = mapped_column("Name", String(200), nullable=False)
    address: Mapped[str] = mapped_column("Address", String(200), default="", nullable=False)


# ---------- PROCUREMENT ----------
class Order(Base):
    __tablename__ = "Order"
    id: Mapped[int] = mapped_column("IdOrder", Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(
        "IdProduct",
        ForeignKey("Product.IdProduct", ondelete="RESTRICT"),
        nullable=False,
    )
    amount: Mapped[int] = mapped_column("Amount", Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column("CreatedAt", DateTime, nullable=False)
    fulfilled_at: Mapped[datetime | None] = mapped_column("FulfilledAt", DateTime)

    __table_args__ = (
        CheckConstraint('"Amount" > 0', name="ck_order_amount_pos"),
        Index("ix_order_product_amount", "IdProduct", "Amount"),
    )


# ---------- INVENTORY ----------
class ProductWarehouse(Base):
    __tablename__ = "Product_Warehouse"
    id: Mapped[int] = mapped_column("IdProductWarehouse", Integer, primary_key=True)
    warehouse_id: Mapped[int] = mapped_column(
        "IdWarehouse",
        ForeignKey("Warehouse.IdWarehouse", ondelete="RESTRICT"),
        nullable=False,
    )
    product_id: Mapped[int] = mapped_column(
        "IdProduct",
        ForeignKey("Product.IdProduct", ondelete="RESTRICT"),
        nullable=False,
    )
    order_id: Mapped[int] = mapped_column(
        "IdOrder",
        ForeignKey("Order.IdOrder", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    amount: Mapped[int] = mapped_column("Amount", Integer, nullable=False)
    # prix total de la ligne (amount * prix unitaire), pas le prix unitaire
    price: Mapped[Decimal] = mapped_column("Price", Numeric(25, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column("CreatedAt", DateTime, nullable=False)

    __table_args__ = (
        CheckConstraint('"Amount" > 0', name="ck_product_warehouse_amount_pos"),
    )
