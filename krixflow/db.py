from datetime import datetime, timezone

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from krixflow.core.config import settings
from krixflow.core.errors import ValidationError

client = AsyncIOMotorClient(settings.mongo_uri)
db = client[settings.db_name]


def get_db() -> AsyncIOMotorDatabase:
    return db


async def init_indexes(database: AsyncIOMotorDatabase) -> None:
    await database.inventory.create_index("code", unique=True)
    await database.inventory.create_index("category")
    await database.flows.create_index([("date", DESCENDING)])
    await database.flows.create_index("code")
    await database.flows.create_index("action")
    await database.flows.create_index("inventory_id")
    await database.users.create_index("email", unique=True)
    await database.candidate_profiles.create_index("user_id", unique=True)
    await database.recruiter_profiles.create_index([("user_id", ASCENDING)], unique=True)


def utcnow() -> datetime:
    # Mongo hands back naive UTC datetimes, so store them the same way
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_object_id(value: str) -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValidationError("Invalid id")


def with_id(doc: dict) -> dict:
    """Copy a raw document, exposing ``_id`` as a string ``id``."""
    out = dict(doc)
    out["id"] = str(out.pop("_id"))
    return out
