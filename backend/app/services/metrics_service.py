"""Dashboard metrics and sparkline series derived from Shopify orders."""

from collections import defaultdict
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from app.models.shopify import DashboardMetrics, SparklinePoint

FULFILLMENT_PENDING_STATUSES = {"partial"}
PAYMENT_CAPTURE_STATUSES = {"authorized", "pending"}


def parse_price(value: Any) -> Decimal:
    """
    Parse a Shopify decimal string.

    Missing, unparsable and non-finite values count as zero.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        price = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not price.is_finite():
        return Decimal("0")
    return price


def needs_fulfillment(order: Mapping[str, Any]) -> bool:
    """Unfulfilled (no status yet) or partially fulfilled."""
    status = order.get("fulfillment_status")
    return not status or status in FULFILLMENT_PENDING_STATUSES


def needs_payment_capture(order: Mapping[str, Any]) -> bool:
    return order.get("financial_status") in PAYMENT_CAPTURE_STATUSES


def calculate_metrics(orders: Iterable[Mapping[str, Any]]) -> DashboardMetrics:
    """Reduce a list of orders into the dashboard summary counters."""
    total_sales = Decimal("0")
    total_orders = 0
    orders_to_fulfill = 0
    payments_to_capture = 0

    for order in orders:
        total_orders += 1
        total_sales += parse_price(order.get("total_price"))
        if needs_fulfillment(order):
            orders_to_fulfill += 1
        if needs_payment_capture(order):
            payments_to_capture += 1

    return DashboardMetrics(
        total_sales=total_sales,
        total_orders=total_orders,
        orders_to_fulfill=orders_to_fulfill,
        payments_to_capture=payments_to_capture,
    )


def _date_sort_key(day: str) -> Tuple[int, date, str]:
    # Unparsable keys go last, in text order
    try:
        return (0, date.fromisoformat(day), day)
    except ValueError:
        return (1, date.min, day)


def generate_sparkline_data(orders: Iterable[Mapping[str, Any]]) -> List[SparklinePoint]:
    """
    Sum sales per calendar day.

    The day is the part of created_at before the "T" separator
    (e.g. 2023-12-01T12:00:00Z -> 2023-12-01). Orders without created_at
    are skipped. One point per day, oldest first.
    """
    sales_by_date: Dict[str, Decimal] = defaultdict(Decimal)

    for order in orders:
        created_at = order.get("created_at")
        if not created_at:
            continue
        day = str(created_at).split("T", 1)[0]
        sales_by_date[day] += parse_price(order.get("total_price"))

    return [
        SparklinePoint(date=day, sales=sales_by_date[day])
        for day in sorted(sales_by_date, key=_date_sort_key)
    ]
