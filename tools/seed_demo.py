from __future__ import annotations

import argparse
from datetime import datetime, timedelta

from order_assistant.auth import hash_password
from order_assistant.db import Base, SessionLocal, engine
from order_assistant.models import Customer, CustomerProduct, Order, OrderItem, Product, User

# (item_number, description, category, customer note)
CATALOG = [
    ("NAP-100", "White Dinner Napkins 15x17", "Napkins", "the usual napkins for the dining room"),
    ("NAP-210", "Brown Kraft Beverage Napkins", "Napkins", ""),
    ("CUP-012", "12oz Hot Cups White", "Cups", "coffee station cups"),
    ("CUP-016", "16oz Clear PET Cold Cups", "Cups", ""),
    ("LID-016", "Flat Lids for 16oz Cold Cups", "Lids", "always order with the 16oz cups"),
    ("TWL-800", "Roll Towels 800ft", "Paper Towels", "kitchen dispenser"),
    ("GLV-NTL", "Nitrile Gloves Large", "Gloves", ""),
    ("BAG-T1", "T-Shirt Bags Medium", "Bags", "takeout counter"),
]


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a demo customer, login and catalog.")
    parser.add_argument("--email", default="demo@example.com")
    parser.add_argument("--password", default="demo-password")
    args = parser.parse_args()

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == args.email).first():
            raise SystemExit(f"User {args.email} already exists; nothing to do.")

        customer = Customer(name="Demo Diner")
        db.add(customer)
        db.flush()

        db.add(
            User(
                name="Demo Buyer",
                email=args.email,
                password_hash=hash_password(args.password),
                customer_id=customer.id,
            )
        )

        products = []
        for item_number, description, category, note in CATALOG:
            p = Product(item_number=item_number, description=description, category=category)
            db.add(p)
            db.flush()
            db.add(CustomerProduct(customer_id=customer.id, product_id=p.id, notes=note))
            products.append(p)

        now = datetime.utcnow()
        for weeks_ago, picks in ((1, [(0, 4), (2, 10)]), (2, [(0, 3), (3, 6), (4, 6)])):
            order = Order(customer_id=customer.id, status="confirmed", created_at=now - timedelta(weeks=weeks_ago))
            db.add(order)
            db.flush()
            for idx, qty in picks:
                db.add(OrderItem(order_id=order.id, product_id=products[idx].id, quantity=qty))

        db.commit()
        print(f"OK  customer {customer.id}  login {args.email} / {args.password}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
