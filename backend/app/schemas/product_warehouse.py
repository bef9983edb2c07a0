from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FulfillmentRequest(BaseModel):
    # clients existants : idProduct / idWarehouse / amount / createdAt
    model_config = ConfigDict(populate_by_name=True)

    id_product: int = Field(gt=0, alias="idProduct")
    id_warehouse: int = Field(gt=0, alias="idWarehouse")
    amount: int = Field(gt=0)
    created_at: datetime = Field(alias="createdAt")

    @field_validator("created_at")
    @classmethod
    def _naive_utc(cls, value: datetime) -> datetime:
        # La base stocke des timestamps sans fuseau : on ramène tout en UTC naïf
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class FulfillmentCreated(BaseModel):
    id: int
