from typing import Literal

from pydantic import BaseModel


class StockBalanceRead(BaseModel):
    product_id: str  # uuid, or raw id for movements of an unknown product
    product_name: str
    unit: str
    categories: list[str]

    balance: float
    average_price: float
    predicted_quantity: float  # balance - planned, peut être négatif

    @classmethod
    def from_balance(cls, b) -> "StockBalanceRead":
        return cls(
            product_id=str(b.product_id),
            product_name=b.product_name,
            unit=b.unit,
            categories=list(b.categories),
            balance=b.balance,
            average_price=b.average_price,
            predicted_quantity=b.predicted_quantity,
        )


SortColumn = Literal[
    "product_name",
    "categories",
    "unit",
    "average_price",
    "balance",
    "predicted_quantity",
]
SortDirection = Literal["asc", "desc"]
