from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from krixflow.core.config import settings
from krixflow.core.security import TokenPayload, get_current_user
from krixflow.db import get_db
from krixflow.services import reports

router = APIRouter(prefix="/api/inventory/reports", tags=["reports"])


@router.get("")
async def stock_distribution(
    _: TokenPayload = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return {"success": True, "data": await reports.category_distribution(db)}


@router.get("/summary")
async def stock_summary(
    _: TokenPayload = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return {"success": True, "data": await reports.stock_summary(db, settings.low_stock_threshold)}


@router.get("/movements")
async def movements(
    days: int = Query(30, ge=1, le=366),
    _: TokenPayload = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return {"success": True, "data": await reports.daily_movements(db, days)}
