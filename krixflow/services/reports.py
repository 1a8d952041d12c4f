# krixflow/services/reports.py
from datetime import timedelta
from typing import List

from motor.motor_asyncio import AsyncIOMotorDatabase

from krixflow.db import utcnow


async def category_distribution(db: AsyncIOMotorDatabase) -> List[dict]:
    """Summed quantity per category, largest first."""
    pipeline = [
        {"$group": {"_id": "$category", "value": {"$sum": "$quantity"}}},
        {"$sort": {"value": -1, "_id": 1}},
    ]
    rows = await db.inventory.aggregate(pipeline).to_list(length=None)
    return [{"name": row["_id"], "value": row["value"]} for row in rows]


async def stock_summary(db: AsyncIOMotorDatabase, low_stock_threshold: int) -> dict:
    total_items = 0
    total_quantity = 0
    stock_value = 0.0
    low_stock = []
    async for item in db.inventory.find({}).sort("name", 1):
        qty = item.get("quantity", 0) or 0
        total_items += 1
        total_quantity += qty
        # items without a price don't count towards value
        stock_value += qty * (item.get("price") or 0)
        if qty < low_stock_threshold:
            low_stock.append({
                "code": item["code"],
                "name": item["name"],
                "category": item["category"],
                "quantity": qty,
            })
    return {
        "total_items": total_items,
        "total_quantity": total_quantity,
        "stock_value": round(stock_value, 2),
        "low_stock_threshold": low_stock_threshold,
        "low_stock_count": len(low_stock),
        "low_stock": low_stock,
    }


async def daily_movements(db: AsyncIOMotorDatabase, days: int = 30) -> List[dict]:
    """IN/OUT totals per calendar day (UTC) for the last ``days`` days, oldest first."""
    today = utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
    start = today - timedelta(days=days - 1)

    buckets = {}
    for offset in range(days):
        day = (start + timedelta(days=offset)).date().isoformat()
        buckets[day] = {"date": day, "in": 0, "out": 0}

    async for flow in db.flows.find({"date": {"$gte": start}}):
        day = flow["date"].date().isoformat()
        if day not in buckets:
            continue
        key = "in" if flow["action"] == "IN" else "out"
        buckets[day][key] += flow["qty"]

    return list(buckets.values())
