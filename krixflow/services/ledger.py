"""
Stock movements and the flow ledger.

Every change to an item's quantity goes through this module. The counter is
moved with a single-document atomic update (``$inc`` guarded by a filter, or a
compare-and-set for absolute overrides) and the matching flow record is
inserted right after. If the flow insert fails the counter change is reversed
before the error propagates, so the ledger and the counters never disagree
for longer than one request.
"""
import logging
from typing import Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from krixflow.core.errors import (
    InsufficientStockError,
    LedgerError,
    NotFoundError,
    ValidationError,
)
from krixflow.db import utcnow
from krixflow.models.inventory import FlowAction, ItemReceive, ItemUpdate

logger = logging.getLogger(__name__)

NOTE_NEW = "New material added"
NOTE_RESTOCK = "Material added - quantity updated"
NOTE_REMOVED = "Material removed"
NOTE_ADJUSTED = "Manual quantity adjustment"

# attempts for the quantity compare-and-set before giving up
MAX_CAS_ATTEMPTS = 5


async def _append_flow(
    db: AsyncIOMotorDatabase,
    item: dict,
    action: FlowAction,
    qty: int,
    note: Optional[str],
    user_id: Optional[str],
) -> dict:
    now = utcnow()
    flow = {
        "date": now,
        "code": item["code"],
        "name": item["name"],
        "action": action.value,
        "qty": qty,
        "note": note,
        "inventory_id": item["_id"],
        "user_id": user_id,
        "created_at": now,
    }
    res = await db.flows.insert_one(flow)
    flow["_id"] = res.inserted_id
    logger.info("%s %s x%d by %s", action.value, item["code"], qty, user_id)
    return flow


async def _compensate(db: AsyncIOMotorDatabase, item_id, delta: int, drop: bool = False) -> None:
    """Undo a counter change whose ledger entry could not be written.

    ``drop`` deletes an item this call created, but only while it still holds
    exactly ``delta``; once another receipt has landed on it the change is
    reversed with ``$inc`` instead.
    """
    logger.warning("Reverting quantity change of %d on item %s", delta, item_id)
    try:
        if drop:
            res = await db.inventory.delete_one({"_id": item_id, "quantity": delta})
            if res.deleted_count:
                return
        await db.inventory.update_one({"_id": item_id}, {"$inc": {"quantity": -delta}})
    except PyMongoError:
        logger.exception("Compensating write failed for item %s", item_id)


async def get_item(db: AsyncIOMotorDatabase, code: str) -> dict:
    item = await db.inventory.find_one({"code": code.strip().upper()})
    if not item:
        raise NotFoundError("Item not found")
    return item


async def receive(
    db: AsyncIOMotorDatabase, payload: ItemReceive, user_id: Optional[str]
) -> Tuple[dict, Optional[dict], bool]:
    """Add stock for ``payload.code``, creating the item when it is new.

    Returns ``(item, flow, created)``; ``flow`` is None when nothing was added.
    """
    now = utcnow()
    to_set = {"updated_at": now, "updated_by": user_id}
    if payload.price is not None:
        to_set["price"] = payload.price
    if payload.size:
        to_set["size"] = payload.size
    update = {
        "$inc": {"quantity": payload.quantity},
        "$set": to_set,
        "$setOnInsert": {
            "name": payload.name,
            "category": payload.category,
            "created_by": user_id,
            "created_at": now,
        },
    }

    # two first-time receipts of the same code race on the unique index;
    # the loser retries and lands on the winner's document
    for attempt in range(2):
        try:
            before = await db.inventory.find_one_and_update(
                {"code": payload.code},
                update,
                upsert=True,
                return_document=ReturnDocument.BEFORE,
            )
            break
        except DuplicateKeyError:
            if attempt:
                raise
    created = before is None

    item = await db.inventory.find_one({"code": payload.code})
    if item is None:
        raise LedgerError(f"Item {payload.code} vanished during receive")

    flow = None
    if payload.quantity > 0:
        note = NOTE_NEW if created else NOTE_RESTOCK
        try:
            flow = await _append_flow(db, item, FlowAction.IN, payload.quantity, note, user_id)
        except PyMongoError as exc:
            await _compensate(db, item["_id"], payload.quantity, drop=created)
            raise LedgerError(details=str(exc))
    return item, flow, created


async def dispatch(
    db: AsyncIOMotorDatabase,
    code: str,
    user_id: Optional[str],
    quantity: Optional[int] = None,
    note: Optional[str] = None,
) -> Tuple[Optional[dict], Optional[dict]]:
    """Remove stock from an item.

    ``quantity=None`` removes everything on hand. When the item reaches zero
    its document is deleted and ``(None, flow)`` is returned.
    """
    item = await get_item(db, code)
    if quantity is None:
        quantity = item.get("quantity", 0)
    elif quantity < 1:
        raise ValidationError("Quantity must be at least 1")

    if quantity == 0:
        # nothing on hand, nothing to log
        await db.inventory.delete_one({"_id": item["_id"], "quantity": 0})
        return None, None

    updated = await db.inventory.find_one_and_update(
        {"_id": item["_id"], "quantity": {"$gte": quantity}},
        {"$inc": {"quantity": -quantity}, "$set": {"updated_at": utcnow(), "updated_by": user_id}},
        return_document=ReturnDocument.AFTER,
    )
    if updated is None:
        current = await db.inventory.find_one({"_id": item["_id"]})
        if current is None:
            raise NotFoundError("Item not found")
        raise InsufficientStockError(
            f"Insufficient stock for {current['code']}: {current.get('quantity', 0)} on hand, {quantity} requested"
        )

    try:
        flow = await _append_flow(db, updated, FlowAction.OUT, quantity, note or NOTE_REMOVED, user_id)
    except PyMongoError as exc:
        await _compensate(db, updated["_id"], -quantity)
        raise LedgerError(details=str(exc))

    if updated["quantity"] == 0:
        res = await db.inventory.delete_one({"_id": updated["_id"], "quantity": 0})
        if res.deleted_count:
            logger.info("Item %s removed from inventory", updated["code"])
            return None, flow
    return updated, flow


async def update_item(
    db: AsyncIOMotorDatabase, payload: ItemUpdate, user_id: Optional[str]
) -> Tuple[dict, Optional[dict]]:
    """Update descriptive fields and optionally override the quantity.

    A quantity override is applied with compare-and-set on the current value
    and the difference is logged as an IN or OUT flow.
    """
    item = await get_item(db, payload.code)

    fields = {"updated_at": utcnow(), "updated_by": user_id}
    if payload.name:
        fields["name"] = payload.name
    if payload.category:
        fields["category"] = payload.category
    if payload.size is not None:
        fields["size"] = payload.size
    if payload.price is not None:
        fields["price"] = payload.price

    if payload.quantity is None:
        updated = await db.inventory.find_one_and_update(
            {"_id": item["_id"]}, {"$set": fields}, return_document=ReturnDocument.AFTER
        )
        if updated is None:
            raise NotFoundError("Item not found")
        return updated, None

    for _ in range(MAX_CAS_ATTEMPTS):
        current_qty = item.get("quantity", 0)
        updated = await db.inventory.find_one_and_update(
            {"_id": item["_id"], "quantity": current_qty},
            {"$set": dict(fields, quantity=payload.quantity)},
            return_document=ReturnDocument.AFTER,
        )
        if updated is not None:
            break
        item = await db.inventory.find_one({"_id": item["_id"]})
        if item is None:
            raise NotFoundError("Item not found")
    else:
        raise LedgerError("Item quantity kept changing, try again")

    delta = payload.quantity - current_qty
    if delta == 0:
        return updated, None

    action = FlowAction.IN if delta > 0 else FlowAction.OUT
    try:
        flow = await _append_flow(db, updated, action, abs(delta), NOTE_ADJUSTED, user_id)
    except PyMongoError as exc:
        await _compensate(db, updated["_id"], delta)
        raise LedgerError(details=str(exc))
    return updated, flow
