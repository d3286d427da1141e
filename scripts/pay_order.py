"""Call the pay endpoint for one order and print the JSON response."""

import argparse
import json
from uuid import uuid4

import httpx


def main() -> None:
    """CLI entrypoint for manual payment calls."""

    parser = argparse.ArgumentParser(description="POST /orders/{order_id}/pay against a running service.")
    parser.add_argument("order_id")
    parser.add_argument("--base-url", default="http://localhost:8000")
    args = parser.parse_args()

    resp = httpx.post(
        f"{args.base_url}/orders/{args.order_id}/pay",
        headers={"x-request-id": str(uuid4())},
        timeout=10.0,
    )
    print(f"status={resp.status_code}")
    print(json.dumps(resp.json(), indent=2))
    if resp.status_code >= 500:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
