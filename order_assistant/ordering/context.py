# order_assistant/ordering/context.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import CatalogFetchError, HistoryFetchError
from ..models import CustomerProduct, Order, Product

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 3


@dataclass
class OrderContext:
    products: List[Dict[str, Any]] = field(default_factory=list)
    order_history: List[Dict[str, Any]] = field(default_factory=list)


def fetch_customer_products(db: Session, customer_id: str) -> List[Dict[str, Any]]:
    """Products the customer may order, each carrying the customer's own note."""
    try:
        rows = (
            db.query(Product, CustomerProduct.notes)
            .join(CustomerProduct, CustomerProduct.product_id == Product.id)
            .filter(CustomerProduct.customer_id == customer_id)
            .order_by(Product.item_number)
            .all()
        )
    except SQLAlchemyError as e:
        raise CatalogFetchError("Failed to fetch customer products") from e

    return [
        {
            "id": product.id,
            "item_number": product.item_number,
            "description": product.description,
            "category": product.category,
            "customerNote": notes or "",
        }
        for product, notes in rows
    ]


def fetch_order_history(
    db: Session,
    customer_id: str,
    products: List[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """Most recent orders expanded against the customer's catalog."""
    try:
        orders = (
            db.query(Order)
            .filter(Order.customer_id == customer_id)
            .order_by(Order.created_at.desc())
            .limit(HISTORY_LIMIT)
            .all()
        )
    except SQLAlchemyError as e:
        raise HistoryFetchError(f"Failed to fetch previous orders: {e}") from e

    by_id = {p["id"]: p for p in products}
    history: List[Dict[str, Any]] = []
    for order in orders:
        items = []
        for item in order.items:
            product = by_id.get(item.product_id) or {}
            items.append(
                {
                    "item_number": product.get("item_number") or "Unknown",
                    "description": product.get("description") or "Unknown",
                    "quantity": item.quantity,
                    "customerNote": product.get("customerNote") or "",
                }
            )
        history.append(
            {
                "date": order.created_at.date().isoformat() if order.created_at else "",
                "items": items,
            }
        )
    return history


def build_order_context(db: Session, customer_id: str, request_id: str = "-") -> OrderContext:
    """
    Catalog + recent history for one customer.

    A catalog failure is fatal (CatalogFetchError propagates). A history
    failure only costs context: it is logged and the history stays empty.
    """
    products = fetch_customer_products(db, customer_id)

    try:
        history = fetch_order_history(db, customer_id, products)
    except HistoryFetchError as e:
        logger.warning("request_id=%s stage=context outcome=history_unavailable error=%s", request_id, e)
        history = []

    logger.info(
        "request_id=%s stage=context outcome=ok products=%d orders=%d",
        request_id,
        len(products),
        len(history),
    )
    return OrderContext(products=products, order_history=history)
