"""
Unit tests for request logging context.
"""

import logging

from app.core.logging import (
    DevelopmentFormatter,
    clear_request_context,
    request_id_var,
    set_request_context,
    store_domain_var,
    user_id_var,
)


class TestRequestContext:
    """Tests for the request context variables."""

    def teardown_method(self):
        clear_request_context()

    def test_incoming_request_id_and_user(self):
        request_id = set_request_context("req-123", user_id="42")

        assert request_id == "req-123"
        assert request_id_var.get() == "req-123"
        assert user_id_var.get() == "42"

    def test_generates_request_id(self):
        request_id = set_request_context()

        assert request_id
        assert request_id_var.get() == request_id
        assert user_id_var.get() == ""

    def test_clear(self):
        set_request_context("req-123", user_id="42")
        store_domain_var.set("test-shop.myshopify.com")

        clear_request_context()

        assert request_id_var.get() == ""
        assert user_id_var.get() == ""
        assert store_domain_var.get() == ""

    def test_context_in_development_format(self):
        set_request_context("req-123", user_id="42")
        store_domain_var.set("test-shop.myshopify.com")
        record = logging.LogRecord("app.api.store", logging.INFO, __file__, 1, "Fetched orders", None, None)

        line = DevelopmentFormatter().format(record)

        assert "[req=req-123, user=42, store=test-shop.myshopify.com]" in line
        assert "Fetched orders" in line
