"""Tests for building catalog and history context."""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from order_assistant.errors import CatalogFetchError, HistoryFetchError
from order_assistant.ordering.context import (
    HISTORY_LIMIT,
    build_order_context,
    fetch_customer_products,
    fetch_order_history,
)


class TestCustomerProducts:
    def test_products_carry_notes(self, db_session, seeded):
        products = fetch_customer_products(db_session, seeded.customer_id)
        by_number = {p["item_number"]: p for p in products}

        assert set(by_number) == {"NAP-100", "CUP-012", "LID-016"}
        assert by_number["NAP-100"]["customerNote"] == "the usual napkins for the dining room"
        assert by_number["LID-016"]["customerNote"] == ""
        assert by_number["CUP-012"]["id"] == seeded.product_ids["CUP-012"]

    def test_scoped_to_customer(self, db_session, seeded):
        assert fetch_customer_products(db_session, seeded.other_customer_id) == []

    def test_store_failure_is_catalog_error(self):
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))
        with pytest.raises(CatalogFetchError) as exc_info:
            fetch_customer_products(db, "c1")
        assert exc_info.value.status_code == 500


class TestOrderHistory:
    def test_most_recent_first_and_limited(self, db_session, seeded):
        products = fetch_customer_products(db_session, seeded.customer_id)
        history = fetch_order_history(db_session, seeded.customer_id, products)

        assert len(history) == HISTORY_LIMIT
        assert [h["date"] for h in history] == ["2024-05-19", "2024-05-12", "2024-05-05"]
        assert history[0]["items"] == [
            {
                "item_number": "NAP-100",
                "description": "White Dinner Napkins",
                "quantity": 4,
                "customerNote": "the usual napkins for the dining room",
            }
        ]

    def test_products_outside_catalog_are_unknown(self, db_session, seeded):
        products = fetch_customer_products(db_session, seeded.customer_id)
        history = fetch_order_history(db_session, seeded.customer_id, products)

        second = {i["item_number"]: i for i in history[1]["items"]}
        assert second["Unknown"]["description"] == "Unknown"
        assert second["Unknown"]["quantity"] == 2
        assert second["CUP-012"]["quantity"] == 10


class TestBuildOrderContext:
    def test_combines_catalog_and_history(self, db_session, seeded):
        context = build_order_context(db_session, seeded.customer_id)
        assert len(context.products) == 3
        assert len(context.order_history) == 3

    def test_history_failure_is_not_fatal(self, db_session, seeded):
        with patch(
            "order_assistant.ordering.context.fetch_order_history",
            side_effect=HistoryFetchError("boom"),
        ):
            context = build_order_context(db_session, seeded.customer_id)

        assert len(context.products) == 3
        assert context.order_history == []

    def test_catalog_failure_is_fatal(self, db_session, seeded):
        with patch(
            "order_assistant.ordering.context.fetch_customer_products",
            side_effect=CatalogFetchError("Failed to fetch customer products"),
        ):
            with pytest.raises(CatalogFetchError):
                build_order_context(db_session, seeded.customer_id)
