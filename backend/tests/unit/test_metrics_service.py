"""
Unit tests for dashboard metrics and the sales sparkline.
"""

from decimal import Decimal

import pytest

from app.services.metrics_service import (
    calculate_metrics,
    generate_sparkline_data,
    needs_fulfillment,
    needs_payment_capture,
    parse_price,
)


class TestParsePrice:
    """Tests for Shopify decimal string parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("10.00", Decimal("10.00")),
            (" 3.5 ", Decimal("3.5")),
            ("0", Decimal("0")),
            (7, Decimal("7")),
            ("-2.25", Decimal("-2.25")),
        ],
    )
    def test_valid_values(self, value, expected):
        assert parse_price(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", "1,000.00", "NaN", "Infinity", True])
    def test_invalid_values_count_as_zero(self, value):
        assert parse_price(value) == Decimal("0")


class TestStatusRules:
    """Tests for the fulfillment and payment predicates."""

    @pytest.mark.parametrize("status", [None, "", "partial"])
    def test_needs_fulfillment(self, status):
        assert needs_fulfillment({"fulfillment_status": status})

    def test_missing_fulfillment_status_needs_fulfillment(self):
        assert needs_fulfillment({})

    @pytest.mark.parametrize("status", ["fulfilled", "restocked"])
    def test_does_not_need_fulfillment(self, status):
        assert not needs_fulfillment({"fulfillment_status": status})

    @pytest.mark.parametrize("status", ["authorized", "pending"])
    def test_needs_payment_capture(self, status):
        assert needs_payment_capture({"financial_status": status})

    @pytest.mark.parametrize("status", ["paid", "refunded", "voided", None])
    def test_does_not_need_payment_capture(self, status):
        assert not needs_payment_capture({"financial_status": status})


class TestCalculateMetrics:
    """Tests for calculate_metrics."""

    def test_empty_orders(self):
        metrics = calculate_metrics([])

        assert metrics.total_sales == Decimal("0")
        assert metrics.total_orders == 0
        assert metrics.orders_to_fulfill == 0
        assert metrics.payments_to_capture == 0
        assert metrics.sessions == "1,024"
        assert metrics.conversion_rate == "0.13%"

    def test_two_orders(self):
        orders = [
            {"total_price": "10.00", "fulfillment_status": None, "financial_status": "pending"},
            {"total_price": "5.50", "fulfillment_status": "fulfilled", "financial_status": "paid"},
        ]

        metrics = calculate_metrics(orders)

        assert metrics.total_sales == Decimal("15.50")
        assert metrics.total_orders == 2
        assert metrics.orders_to_fulfill == 1
        assert metrics.payments_to_capture == 1

    def test_sample_orders(self, sample_orders):
        metrics = calculate_metrics(sample_orders)

        assert metrics.total_sales == Decimal("17.00")
        assert metrics.total_orders == 4
        assert metrics.orders_to_fulfill == 2
        assert metrics.payments_to_capture == 2

    def test_sum_is_exact(self):
        orders = [{"total_price": "0.10"}, {"total_price": "0.20"}]
        assert calculate_metrics(orders).total_sales == Decimal("0.30")

    def test_counts_bounded_by_total(self, sample_orders):
        metrics = calculate_metrics(sample_orders * 3)

        assert metrics.orders_to_fulfill <= metrics.total_orders
        assert metrics.payments_to_capture <= metrics.total_orders

    def test_serializes_camel_case(self, sample_orders):
        data = calculate_metrics(sample_orders).model_dump(by_alias=True)

        assert data == {
            "totalSales": 17.0,
            "totalOrders": 4,
            "ordersToFulfill": 2,
            "paymentsToCapture": 2,
            "sessions": "1,024",
            "conversionRate": "0.13%",
        }


class TestGenerateSparklineData:
    """Tests for generate_sparkline_data."""

    def test_empty_orders(self):
        assert generate_sparkline_data([]) == []

    def test_groups_by_day(self):
        orders = [
            {"created_at": "2023-12-01T10:00:00Z", "total_price": "10"},
            {"created_at": "2023-12-01T15:00:00Z", "total_price": "5"},
            {"created_at": "2023-12-02T09:00:00Z", "total_price": "7"},
        ]

        points = generate_sparkline_data(orders)

        assert [(p.date, p.sales) for p in points] == [
            ("2023-12-01", Decimal("15")),
            ("2023-12-02", Decimal("7")),
        ]

    def test_sorted_ascending_regardless_of_input_order(self):
        orders = [
            {"created_at": "2024-01-02T00:00:00Z", "total_price": "1"},
            {"created_at": "2023-12-31T00:00:00Z", "total_price": "2"},
            {"created_at": "2024-01-01T00:00:00Z", "total_price": "3"},
        ]

        dates = [p.date for p in generate_sparkline_data(orders)]

        assert dates == ["2023-12-31", "2024-01-01", "2024-01-02"]

    def test_day_is_taken_from_timestamp_text(self, sample_orders):
        # Local offsets are not converted to UTC
        points = generate_sparkline_data(sample_orders)

        assert [(p.date, p.sales) for p in points] == [
            ("2023-12-01", Decimal("15.00")),
            ("2023-12-03", Decimal("2.00")),
        ]

    def test_orders_without_created_at_are_skipped(self):
        orders = [
            {"total_price": "99"},
            {"created_at": None, "total_price": "99"},
            {"created_at": "2023-12-01T00:00:00Z", "total_price": "1"},
        ]

        points = generate_sparkline_data(orders)

        assert len(points) == 1
        assert points[0].sales == Decimal("1")

    def test_unparsable_days_sort_last(self):
        orders = [
            {"created_at": "someday", "total_price": "1"},
            {"created_at": "2023-12-01T00:00:00Z", "total_price": "2"},
        ]

        dates = [p.date for p in generate_sparkline_data(orders)]

        assert dates == ["2023-12-01", "someday"]

    def test_sum_matches_total_sales(self, sample_orders):
        points = generate_sparkline_data(sample_orders)

        assert sum(p.sales for p in points) == calculate_metrics(sample_orders).total_sales

    def test_serializes_sales_as_number(self):
        points = generate_sparkline_data([{"created_at": "2023-12-01T00:00:00Z", "total_price": "120.50"}])

        assert points[0].model_dump(by_alias=True) == {"date": "2023-12-01", "sales": 120.5}
