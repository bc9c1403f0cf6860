"""Order Schemas - Pydantic models for the fulfillment API boundary.

Invariants:
    - ProcessOrderResponse serializes as {"id": <order id>}
"""

from pydantic import BaseModel


class ProcessOrderResponse(BaseModel):
    """Successful fulfillment run - echoes the processed order's id."""
    id: int
