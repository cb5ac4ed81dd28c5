"""
Dashboard models derived from Shopify orders and store connection payloads.

Shopify orders and products themselves stay plain dicts: they are passed
through to the frontend untouched.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing to the camelCase keys the dashboard expects."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DashboardMetrics(CamelModel):
    """Summary counters for the dashboard header cards."""

    total_sales: Decimal = Decimal("0")
    total_orders: int = 0
    orders_to_fulfill: int = 0
    payments_to_capture: int = 0

    # Not tracked by the Admin REST API; placeholders the dashboard renders as-is
    sessions: str = "1,024"
    conversion_rate: str = "0.13%"

    @field_serializer("total_sales")
    def serialize_total_sales(self, value: Decimal) -> float:
        return float(value)


class SparklinePoint(CamelModel):
    """Sales summed over one calendar day."""

    date: str
    sales: Decimal = Decimal("0")

    @field_serializer("sales")
    def serialize_sales(self, value: Decimal) -> float:
        return float(value)


class StoreConnectRequest(CamelModel):
    """Request model for connecting a Shopify store."""

    user_id: int = Field(..., gt=0)
    shopify_domain: str = Field(..., min_length=1, max_length=255)
    access_token: str = Field(..., min_length=1)
    api_key: Optional[str] = None


class StoreResponse(CamelModel):
    """Store details returned to the frontend, without secrets."""

    id: int
    user_id: int
    shopify_domain: str
    is_active: bool
