"""
Erreurs métier de l'enregistrement d'une réception.

Chaque erreur porte le status HTTP que la couche API doit renvoyer :
404/409 = erreur client, 500 = échec serveur.
"""

from __future__ import annotations


class FulfillmentError(Exception):
    status_code = 500
    message = "Fulfillment failed"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class OrderNotFound(FulfillmentError):
    status_code = 404
    message = "No open order matches this product, amount and date"


class ProductPriceNotFound(FulfillmentError):
    status_code = 404
    message = "Product not found"


class WarehouseNotFound(FulfillmentError):
    status_code = 404
    message = "Warehouse not found"


class UpdateFailed(FulfillmentError):
    status_code = 409
    message = "Order could not be marked as fulfilled"


class InsertFailed(FulfillmentError):
    status_code = 500
    message = "Product could not be added to the warehouse"
