from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from krixflow.core.errors import NotFoundError
from krixflow.core.security import TokenPayload, get_current_user, require_roles
from krixflow.db import get_db, to_object_id, utcnow
from krixflow.models.user import InstructorRatingUpdate, Role, UserResponse
from krixflow.routers.auth import public_user

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def read_me(
    current: TokenPayload = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    user = await db.users.find_one({"_id": to_object_id(current.user_id)})
    if not user:
        raise NotFoundError("User not found")
    return UserResponse(data=public_user(user))


@router.put("/me/instructor-rating", response_model=UserResponse)
async def set_instructor_rating(
    body: InstructorRatingUpdate,
    current: TokenPayload = Depends(require_roles(Role.INSTRUCTOR)),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Completing the instructor profile means the rating is no longer null."""
    user = await db.users.find_one_and_update(
        {"_id": to_object_id(current.user_id)},
        {"$set": {"instructor_rating": body.rating, "updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if not user:
        raise NotFoundError("User not found")
    return UserResponse(data=public_user(user))
