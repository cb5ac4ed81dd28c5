"""Data models."""

# Export dashboard models
from app.models.shopify import (
    DashboardMetrics,
    SparklinePoint,
    StoreConnectRequest,
    StoreResponse,
)
