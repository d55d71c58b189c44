"""
Pydantic Models - Schemas for the shop API and the cart surface

- Remote payloads (stock, product) validated before use
- Request model for quantity updates coming from the UI layer
"""

from pydantic import BaseModel, ConfigDict, Field


class StockResponse(BaseModel):
    """GET /stock/{id} payload."""
    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    amount: int = Field(..., description="Units available for purchase")


class ProductResponse(BaseModel):
    """GET /products/{id} payload. Product fields are opaque and kept as-is."""
    model_config = ConfigDict(extra="allow")

    id: int


class ProductAmountUpdate(BaseModel):
    """Quantity change requested by the UI ({productId, amount})."""
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(..., alias="productId")
    amount: int
