from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from backend.app.db.models.models_v1 import Order, Product, Warehouse


def run_seed(db: Session) -> None:
    """
    Données de démo : produit 5 (2.50), entrepôt 7, commande 10 ouverte.

    Idempotent : ne recrée rien si les lignes existent déjà.
    """
    # 1) Produit
    if not db.get(Product, 5):
        db.add(Product(id=5, name="Riz 25kg", description="Sac de riz", price=Decimal("2.50")))

    # 2) Entrepôt
    if not db.get(Warehouse, 7):
        db.add(Warehouse(id=7, name="TAH-DOCK", address="Port de Papeete"))

    db.flush()

    # 3) Commande ouverte (FulfilledAt vide)
    if not db.get(Order, 10):
        db.add(
            Order(
                id=10,
                product_id=5,
                amount=3,
                created_at=datetime(2024, 1, 1),
                fulfilled_at=None,
            )
        )

    db.commit()


if __name__ == "__main__":
    from backend.app.db.session import SessionLocal

    db = SessionLocal()
    try:
        run_seed(db)
        print("SEED OK: product=5, warehouse=7, order=10")
    finally:
        db.close()
