# order_assistant/models.py
from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from .db import Base


def _uuid() -> str:
    return str(uuid4())


class Customer(Base):
    __tablename__ = "customers"
    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String, nullable=False)


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    # Profile binding: a signed-in user may only act for this customer.
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=True)


class Product(Base):
    __tablename__ = "products"
    id = Column(String(36), primary_key=True, default=_uuid)
    item_number = Column(String, unique=True, index=True, nullable=False)
    description = Column(String, nullable=False)
    category = Column(String, nullable=True)


class CustomerProduct(Base):
    __tablename__ = "customer_products"
    __table_args__ = (UniqueConstraint("customer_id", "product_id"),)
    id = Column(Integer, primary_key=True)
    customer_id = Column(String(36), ForeignKey("customers.id"), index=True, nullable=False)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False)
    notes = Column(Text, default="")


class Order(Base):
    __tablename__ = "orders"
    id = Column(Integer, primary_key=True)
    customer_id = Column(String(36), ForeignKey("customers.id"), index=True, nullable=False)
    status = Column(String, default="pending")  # pending | confirmed | cancelled
    created_at = Column(DateTime, default=datetime.utcnow)
    delivery_date = Column(Date, nullable=True)

    items = relationship("OrderItem", back_populates="order", lazy="selectin")


class OrderItem(Base):
    __tablename__ = "order_items"
    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    order = relationship("Order", back_populates="items")
