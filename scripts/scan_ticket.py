# scripts/scan_ticket.py
import os
import time
import uuid
import argparse

import httpx


def main() -> None:
    parser = argparse.ArgumentParser(description="Post one ticket scan to a running check-in gate.")
    parser.add_argument("unique_id")
    parser.add_argument("--scanner", default=os.environ.get("SCANNER_NAME"))
    parser.add_argument("--base-url", default=os.environ.get("BASE_URL", "http://127.0.0.1:8000"))
    parser.add_argument("--idempotency-key", default=None, help="reuse to replay a cached response")
    args = parser.parse_args()

    body = {"uniqueId": args.unique_id, "timestamp": int(time.time() * 1000)}
    if args.scanner:
        body["scannedBy"] = args.scanner

    headers = {"Idempotency-Key": args.idempotency_key or str(uuid.uuid4())}
    r = httpx.post(f"{args.base_url.rstrip('/')}/scan", json=body, headers=headers, timeout=5.0)
    r.raise_for_status()
    data = r.json()

    print(f"{data['status'].upper()}: {data['message']}")
    ticket = data.get("ticket")
    if ticket:
        print(f"  team={ticket['teamName']} leader={ticket['leaderName']} "
              f"count={ticket['checkinCounter']} scanned_by={ticket.get('scannedBy', '-')}")


if __name__ == "__main__":
    main()
