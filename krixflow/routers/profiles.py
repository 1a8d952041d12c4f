# krixflow/routers/profiles.py
from typing import Type

from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from krixflow.core.errors import ConflictError, NotFoundError
from krixflow.core.security import TokenPayload, get_current_user, require_roles
from krixflow.db import get_db, utcnow, with_id
from krixflow.models.profile import (
    CandidateProfileCreate,
    CandidateProfileDB,
    CandidateProfileUpdate,
    RecruiterProfileCreate,
    RecruiterProfileDB,
    RecruiterProfileUpdate,
    VerificationStatus,
)
from krixflow.models.user import Role

candidates = APIRouter(prefix="/api/candidates", tags=["candidates"])
recruiters = APIRouter(prefix="/api/recruiters", tags=["recruiters"])

CANDIDATE_FIELDS = (
    "current_designation",
    "total_experience_years",
    "expected_salary",
    "availability_status",
    "work_type_preference",
)


def profile_completion(doc: dict) -> int:
    filled = sum(1 for f in CANDIDATE_FIELDS if doc.get(f) not in (None, ""))
    return round(filled * 100 / len(CANDIDATE_FIELDS))


async def _get_profile(collection, user_id: str, model: Type[BaseModel]):
    doc = await collection.find_one({"user_id": user_id})
    if not doc:
        raise NotFoundError("Profile not found")
    return model(**with_id(doc))


async def _create_profile(collection, user_id: str, fields: dict, model: Type[BaseModel]):
    now = utcnow()
    doc = dict(fields, user_id=user_id, created_at=now, updated_at=now)
    try:
        res = await collection.insert_one(doc)
    except DuplicateKeyError:
        raise ConflictError("Profile already exists")
    doc["_id"] = res.inserted_id
    return model(**with_id(doc))


async def _update_profile(collection, user_id: str, fields: dict, model: Type[BaseModel]):
    doc = await collection.find_one_and_update(
        {"user_id": user_id},
        {"$set": dict(fields, updated_at=utcnow())},
        return_document=ReturnDocument.AFTER,
    )
    if not doc:
        raise NotFoundError("Profile not found")
    return model(**with_id(doc))


# ---- candidates ----
@candidates.get("/profile/user/{user_id}", response_model=CandidateProfileDB)
async def get_candidate_profile(
    user_id: str,
    _: TokenPayload = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return await _get_profile(db.candidate_profiles, user_id, CandidateProfileDB)


@candidates.post("/profile", response_model=CandidateProfileDB, status_code=status.HTTP_201_CREATED)
async def create_candidate_profile(
    payload: CandidateProfileCreate,
    user: TokenPayload = Depends(require_roles(Role.CANDIDATE)),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    existing = await db.candidate_profiles.find_one({"user_id": user.user_id})
    if existing:
        raise ConflictError("Profile already exists")
    fields = payload.model_dump(mode="json")
    fields["profile_completion"] = profile_completion(fields)
    return await _create_profile(db.candidate_profiles, user.user_id, fields, CandidateProfileDB)


@candidates.put("/profile", response_model=CandidateProfileDB)
async def update_candidate_profile(
    payload: CandidateProfileUpdate,
    user: TokenPayload = Depends(require_roles(Role.CANDIDATE)),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    current = await db.candidate_profiles.find_one({"user_id": user.user_id})
    if not current:
        raise NotFoundError("Profile not found")
    fields = payload.model_dump(mode="json", exclude_none=True)
    fields["profile_completion"] = profile_completion(dict(current, **fields))
    return await _update_profile(db.candidate_profiles, user.user_id, fields, CandidateProfileDB)


# ---- recruiters ----
@recruiters.get("/profile/user/{user_id}", response_model=RecruiterProfileDB)
async def get_recruiter_profile(
    user_id: str,
    _: TokenPayload = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return await _get_profile(db.recruiter_profiles, user_id, RecruiterProfileDB)


@recruiters.post("/profile", response_model=RecruiterProfileDB, status_code=status.HTTP_201_CREATED)
async def create_recruiter_profile(
    payload: RecruiterProfileCreate,
    user: TokenPayload = Depends(require_roles(Role.RECRUITER)),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    existing = await db.recruiter_profiles.find_one({"user_id": user.user_id})
    if existing:
        raise ConflictError("Profile already exists")
    fields = payload.model_dump(mode="json")
    fields["is_verified"] = False
    fields["verification_status"] = VerificationStatus.PENDING.value
    return await _create_profile(db.recruiter_profiles, user.user_id, fields, RecruiterProfileDB)


@recruiters.put("/profile", response_model=RecruiterProfileDB)
async def update_recruiter_profile(
    payload: RecruiterProfileUpdate,
    user: TokenPayload = Depends(require_roles(Role.RECRUITER)),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    fields = payload.model_dump(mode="json", exclude_none=True)
    return await _update_profile(db.recruiter_profiles, user.user_id, fields, RecruiterProfileDB)
