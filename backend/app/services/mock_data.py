"""
Sample payloads served when Shopify returns nothing.

Used by app/api/store.py when the client comes back empty and
settings.mock_fallback_enabled is on, so the dashboard always has
something to render.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
def mock_orders() -> List[Dict[str, Any]]:
    """Three sample orders stamped with the current time."""
    now = _now_iso()
    return [
        {
            "id": "1",
            "name": "#1001",
            "created_at": now,
            "total_price": "49.99",
            "fulfillment_status": "fulfilled",
            "financial_status": "paid",
        },
        {
            "id": "2",
            "name": "#1002",
            "created_at": now,
            "total_price": "89.50",
            "fulfillment_status": None,
            "financial_status": "pending",
        },
        {
            "id": "3",
            "name": "#1003",
            "created_at": now,
            "total_price": "120.00",
            "fulfillment_status": "partial",
            "financial_status": "authorized",
        },
    ]


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------
MOCK_DASHBOARD_RESPONSE = {
    "metrics": {
        "totalSales": 12500.50,
        "totalOrders": 150,
        "ordersToFulfill": 12,
        "paymentsToCapture": 5,
        "sessions": "1,024",
        "conversionRate": "0.13%",
    },
    "sparkline": [
        {"date": "2023-12-01", "sales": 120.00},
        {"date": "2023-12-02", "sales": 450.50},
        {"date": "2023-12-03", "sales": 230.75},
        {"date": "2023-12-04", "sales": 680.20},
        {"date": "2023-12-05", "sales": 320.00},
    ],
}


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
MOCK_PRODUCTS = [
    {"id": "1", "title": "Sample Product 1", "status": "active", "variants": [{"inventory_quantity": 10}]},
    {"id": "2", "title": "Sample Product 2", "status": "active", "variants": [{"inventory_quantity": 5}]},
    {"id": "3", "title": "Sample Product 3", "status": "draft", "variants": [{"inventory_quantity": 0}]},
]
