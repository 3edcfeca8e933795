"""
Load Simulation Script

Fires concurrent orders at a running Campus Food Court API and checks
read-after-write, newest-first listing and status updates.
Run from project root: python scripts/simulate.py --orders 50
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime
from typing import Any, Optional

import httpx

API_BASE_URL = "http://localhost:3000"
TOTAL_ORDERS = 50

FIRST_NAMES = ["Aarav", "Diya", "Kabir", "Meera", "Rohan", "Sara", "Vikram", "Anika", "Dev", "Isha"]
LAST_NAMES = ["Sharma", "Patel", "Iyer", "Khan", "Reddy", "Singh", "Das", "Nair", "Gupta", "Rao"]
STATUSES = ["preparing", "ready", "delivered"]


def generate_order_payload(vendor_id: int, menu: list[dict]) -> dict[str, Any]:
    """Random order for one vendor built from its menu."""
    picks = random.sample(menu, k=random.randint(1, len(menu)))
    items = [
        {
            "menu_item_id": item["id"],
            "name": item["name"],
            "quantity": random.randint(1, 3),
            "unit_price": item["price"],
        }
        for item in picks
    ]
    total = round(sum(i["quantity"] * i["unit_price"] for i in items), 2)

    payload: dict[str, Any] = {
        "vendor_id": vendor_id,
        "customer_name": f"{random.choice(FIRST_NAMES)} {random.choice(LAST_NAMES)}",
        "total_amount": total,
        "items": items,
    }
    if random.random() < 0.7:
        payload["customer_phone"] = f"98{random.randint(10000000, 99999999)}"
    return payload


async def send_order(
    client: httpx.AsyncClient,
    order_num: int,
    menus: dict[int, list[dict]],
) -> dict[str, Any]:
    """Create one order and read it back."""
    vendor_id = random.choice([v for v, menu in menus.items() if menu])
    payload = generate_order_payload(vendor_id, menus[vendor_id])
    start_time = time.time()

    try:
        response = await client.post("/api/orders", json=payload)
        elapsed = round(time.time() - start_time, 3)
        if response.status_code != 201:
            return {"order_num": order_num, "success": False, "error": response.text[:100], "time": elapsed}

        created = response.json()
        fetched = (await client.get(f"/api/orders/{created['id']}")).json()
        consistent = all(fetched.get(k) == payload.get(k) for k in ("vendor_id", "customer_name", "total_amount"))

        return {
            "order_num": order_num,
            "success": consistent,
            "order_id": created["id"],
            "total": payload["total_amount"],
            "time": elapsed,
            "source": response.headers.get("x-data-source"),
            "error": None if consistent else "read-after-write mismatch",
        }
    except httpx.HTTPError as e:
        elapsed = round(time.time() - start_time, 3)
        return {"order_num": order_num, "success": False, "error": str(e)[:100], "time": elapsed}


async def check_single_flows(client: httpx.AsyncClient) -> Optional[dict[int, list[dict]]]:
    """Pre-flight: health, vendors and menus. Returns menus keyed by vendor."""
    print("\n1️⃣ Health Check...")
    response = await client.get("/health")
    if response.status_code != 200:
        print(f"   ❌ Failed: {response.text}")
        return None
    data = response.json()
    print(f"   ✅ Status: {data.get('status')}")
    print(f"   Database: {data.get('database')}")

    print("\n2️⃣ Vendors...")
    response = await client.get("/api/vendors")
    vendors = response.json()
    print(f"   ✅ {len(vendors)} vendors ({response.headers.get('x-data-source')})")

    print("\n3️⃣ Menus...")
    menus = {}
    for vendor in vendors:
        menus[vendor["id"]] = (await client.get(f"/api/menu/{vendor['id']}")).json()
        print(f"   {vendor['name']}: {len(menus[vendor['id']])} items")

    if not any(menus.values()):
        print("   ❌ No menu items to order from")
        return None
    return menus


async def run_simulation(num_orders: int = TOTAL_ORDERS, base_url: str = API_BASE_URL) -> dict[str, Any]:
    """
    Run the concurrent order simulation.

    Args:
        num_orders: Number of orders to fire concurrently
        base_url: Root URL of the API
    """
    print("=" * 70)
    print("🔥 FOOD COURT SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {base_url}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        menus = await check_single_flows(client)
        if menus is None:
            print("\n❌ Pre-flight checks failed.")
            sys.exit(1)

        start_time = time.time()
        results = await asyncio.gather(*[send_order(client, i + 1, menus) for i in range(num_orders)])
        total_time = round(time.time() - start_time, 2)

        successful = [r for r in results if r["success"]]
        failed = [r for r in results if not r["success"]]

        for r in successful[: len(STATUSES)]:
            new_status = random.choice(STATUSES)
            await client.patch(f"/api/orders/{r['order_id']}/status", json={"status": new_status})

        listing = (await client.get("/api/orders")).json()
        created = [o["created_at"] for o in listing]
        ordered = created == sorted(created, reverse=True)

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Successful Orders: {len(successful)}/{num_orders}")
    print(f"❌ Failed Orders: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")
    print(f"📜 Listing: {len(listing)} orders, newest first: {'yes' if ordered else 'NO'}")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        total_revenue = sum(r["total"] for r in successful)
        print("\n📈 Performance Metrics:")
        print(f"   Average Response: {avg_time}s")
        print(f"   Fastest: {min(r['time'] for r in successful)}s")
        print(f"   Slowest: {max(r['time'] for r in successful)}s")
        print(f"   💰 Total Revenue: ₹{total_revenue:.2f}")

    if failed:
        print("\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Food Court Load Simulation")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--url", default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()

    summary = asyncio.run(run_simulation(args.orders, args.url))
    sys.exit(0 if summary["failed"] == 0 else 1)
