# krixflow/routers/inventory.py
import re
from datetime import date, datetime, time, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from krixflow.core.security import TokenPayload, get_current_user
from krixflow.db import get_db, with_id
from krixflow.models.inventory import (
    FlowAction,
    FlowListResponse,
    FlowRecordDB,
    InventoryItemDB,
    ItemListResponse,
    ItemReceive,
    ItemResponse,
    ItemUpdate,
    StockEntry,
    StockResponse,
)
from krixflow.services import ledger

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


def item_out(doc: dict) -> InventoryItemDB:
    return InventoryItemDB(**with_id(doc))


def flow_out(doc: dict) -> FlowRecordDB:
    data = with_id(doc)
    if data.get("inventory_id") is not None:
        data["inventory_id"] = str(data["inventory_id"])
    return FlowRecordDB(**data)


# ---- items ----
@router.get("/items", response_model=ItemListResponse)
async def list_items(
    search: Optional[str] = None,
    category: Optional[str] = None,
    code: Optional[str] = None,
    _: TokenPayload = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    query = {}
    if code:
        query["code"] = code.strip().upper()
    if category:
        query["category"] = category
    if search:
        pattern = {"$regex": re.escape(search), "$options": "i"}
        query["$or"] = [{"name": pattern}, {"code": pattern}, {"category": pattern}]

    items = [item_out(doc) async for doc in db.inventory.find(query).sort("name", 1)]
    return ItemListResponse(data=items)


@router.get("/items/{code}", response_model=ItemResponse)
async def get_item(
    code: str,
    _: TokenPayload = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    doc = await ledger.get_item(db, code)
    return ItemResponse(data=item_out(doc))


@router.post("/items", response_model=ItemResponse)
async def add_item(
    payload: ItemReceive,
    response: Response,
    user: TokenPayload = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Add a new material, or restock an existing code."""
    doc, flow, created = await ledger.receive(db, payload, user.user_id)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return ItemResponse(
        message="Item created successfully" if created else "Item updated successfully",
        data=item_out(doc),
        flow=flow_out(flow) if flow else None,
    )


@router.put("/items", response_model=ItemResponse)
async def update_item(
    payload: ItemUpdate,
    user: TokenPayload = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    doc, flow = await ledger.update_item(db, payload, user.user_id)
    return ItemResponse(
        message="Item updated successfully",
        data=item_out(doc),
        flow=flow_out(flow) if flow else None,
    )


@router.delete("/items", response_model=ItemResponse)
async def remove_item(
    code: str = Query(..., min_length=1),
    quantity: Optional[int] = Query(None, ge=1),
    note: Optional[str] = None,
    user: TokenPayload = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Take stock out. Without a quantity everything on hand is removed."""
    doc, flow = await ledger.dispatch(db, code, user.user_id, quantity=quantity, note=note)
    if doc is None:
        return ItemResponse(
            message="Item deleted successfully",
            flow=flow_out(flow) if flow else None,
        )
    return ItemResponse(
        message="Item quantity reduced successfully",
        data=item_out(doc),
        flow=flow_out(flow),
    )


# ---- stock ----
@router.get("/stock", response_model=StockResponse)
async def get_stock(
    _: TokenPayload = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    stock = []
    async for doc in db.inventory.find({}).sort("name", 1):
        stock.append(StockEntry(**doc))
    return StockResponse(data=stock)


# ---- flow ledger ----
@router.get("/flow", response_model=FlowListResponse)
async def get_flow(
    limit: int = Query(100, ge=1, le=500),
    skip: int = Query(0, ge=0),
    action: Optional[str] = None,
    code: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    _: TokenPayload = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    query = {}
    # unknown actions are ignored rather than rejected
    if action and action.upper() in (FlowAction.IN.value, FlowAction.OUT.value):
        query["action"] = action.upper()
    if code:
        query["code"] = code.strip().upper()
    if date_from or date_to:
        query["date"] = {}
        if date_from:
            query["date"]["$gte"] = datetime.combine(date_from, time.min)
        if date_to:
            query["date"]["$lt"] = datetime.combine(date_to + timedelta(days=1), time.min)

    cursor = db.flows.find(query).sort([("date", -1), ("_id", -1)]).skip(skip).limit(limit)
    flows = [flow_out(doc) async for doc in cursor]
    total = await db.flows.count_documents(query)
    return FlowListResponse(data=flows, total=total, limit=limit, skip=skip)
