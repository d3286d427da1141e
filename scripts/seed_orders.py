"""Insert sample pending orders into the configured database."""

import argparse
import json
import random
from uuid import uuid4

from orderpay.common.config import settings
from orderpay.common.db import build_engine, build_session_factory, init_schema
from orderpay.domain.order import Order
from orderpay.services.payments.store import SqlOrderStore


def main() -> None:
    """CLI entrypoint for local seeding."""

    parser = argparse.ArgumentParser(description="Seed pending orders for manual payment testing.")
    parser.add_argument("--dsn", default=settings.database_dsn)
    parser.add_argument("--count", type=int, default=5)
    parser.add_argument("--currency", default="USD")
    parser.add_argument(
        "--decline",
        action="store_true",
        help="Use force-decline customer emails so the simulated gateway declines them",
    )
    args = parser.parse_args()

    engine = build_engine(args.dsn)
    init_schema(engine)
    store = SqlOrderStore(build_session_factory(engine))

    created = []
    for idx in range(args.count):
        prefix = "force-decline" if args.decline else "customer"
        order = Order(
            id=f"order-{uuid4().hex[:12]}",
            amount=random.randint(100, 250000),
            currency=args.currency,
            customer_email=f"{prefix}-{idx}@example.com",
        )
        store.save(order)
        created.append(order.to_dict())
    print(json.dumps(created, indent=2))


if __name__ == "__main__":
    main()
