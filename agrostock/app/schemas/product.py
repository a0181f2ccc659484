import uuid

from pydantic import BaseModel, ConfigDict


class ProductRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    unit: str


class AveragePriceRead(BaseModel):
    product_id: uuid.UUID
    average_price: float
