from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from backend.app.api.deps import get_fulfillment_writer
from backend.app.schemas.product_warehouse import FulfillmentCreated, FulfillmentRequest
from backend.services.exceptions import FulfillmentError
from backend.services.fulfillment import OrderFulfillmentWriter

router = APIRouter(prefix="/warehouses")


@router.post("", response_model=FulfillmentCreated)
def add_product(
    payload: FulfillmentRequest,
    writer: OrderFulfillmentWriter = Depends(get_fulfillment_writer),
):
    try:
        new_id = writer.record_fulfillment(payload)
    except FulfillmentError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {"id": new_id}


@router.post("/procedure", response_model=FulfillmentCreated)
def add_product_with_procedure(
    payload: FulfillmentRequest,
    writer: OrderFulfillmentWriter = Depends(get_fulfillment_writer),
):
    try:
        new_id = writer.record_fulfillment_via_procedure(payload)
    except FulfillmentError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    # 0 = la procédure n'a rien ajouté
    if new_id == 0:
        raise HTTPException(status_code=400, detail="Failed to add")

    return {"id": new_id}
