import logging

from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from krixflow.core.errors import AuthenticationError, ConflictError, NotFoundError
from krixflow.core.security import (
    TokenPayload,
    create_access_token,
    create_tokens,
    hash_password,
    verify_password,
    verify_refresh_token,
)
from krixflow.db import get_db, to_object_id, utcnow
from krixflow.models.user import (
    AuthResponse,
    RefreshRequest,
    TokenRefreshResponse,
    UserCreate,
    UserLogin,
    UserPublic,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def public_user(doc: dict) -> UserPublic:
    return UserPublic(
        id=str(doc["_id"]),
        name=doc["name"],
        email=doc["email"],
        role=doc["role"],
        primary_role=doc.get("primary_role", doc["role"]),
        roles=doc.get("roles") or [doc["role"]],
        instructor_rating=doc.get("instructor_rating"),
        created_at=doc.get("created_at"),
    )


def token_payload(doc: dict) -> TokenPayload:
    return TokenPayload(user_id=str(doc["_id"]), email=doc["email"], role=doc["role"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(user: UserCreate, db: AsyncIOMotorDatabase = Depends(get_db)):
    email = user.email.lower()
    existing = await db.users.find_one({"email": email})
    if existing:
        raise ConflictError("User with this email already exists")

    now = utcnow()
    role = user.role.value
    user_dict = {
        "name": user.name.strip(),
        "email": email,
        "password": hash_password(user.password),
        "role": role,
        "primary_role": role,
        "roles": [role],
        "instructor_rating": None,
        "created_at": now,
        "updated_at": now,
    }
    try:
        res = await db.users.insert_one(user_dict)
    except DuplicateKeyError:
        raise ConflictError("User with this email already exists")
    user_dict["_id"] = res.inserted_id
    logger.info("Registered %s as %s", email, role)

    return AuthResponse(
        message="User registered successfully",
        user=public_user(user_dict),
        **create_tokens(token_payload(user_dict)),
    )


@router.post("/login", response_model=AuthResponse)
async def login(user: UserLogin, db: AsyncIOMotorDatabase = Depends(get_db)):
    db_user = await db.users.find_one({"email": user.email.lower()})
    if not db_user or not verify_password(user.password, db_user["password"]):
        raise AuthenticationError("Invalid email or password")

    return AuthResponse(
        message="Login successful",
        user=public_user(db_user),
        **create_tokens(token_payload(db_user)),
    )


@router.post("/refresh", response_model=TokenRefreshResponse)
async def refresh(body: RefreshRequest, db: AsyncIOMotorDatabase = Depends(get_db)):
    decoded = verify_refresh_token(body.refresh_token)
    if decoded is None:
        raise AuthenticationError("Invalid or expired refresh token")

    db_user = await db.users.find_one({"_id": to_object_id(decoded.user_id)})
    if not db_user:
        raise NotFoundError("User not found")

    return TokenRefreshResponse(
        message="Token refreshed successfully",
        token=create_access_token(token_payload(db_user)),
    )
