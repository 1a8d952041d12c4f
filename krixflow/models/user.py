from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, computed_field

from krixflow.models.base import RequestModel


class Role(str, Enum):
    LEARNER = "LEARNER"
    INSTRUCTOR = "INSTRUCTOR"
    CANDIDATE = "CANDIDATE"
    RECRUITER = "RECRUITER"


class UserCreate(RequestModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Role = Role.LEARNER


class UserLogin(RequestModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(RequestModel):
    refresh_token: str = Field(..., min_length=1)


class UserPublic(BaseModel):
    id: str
    name: str
    email: EmailStr
    role: Role
    primary_role: Role
    roles: List[Role]
    instructor_rating: Optional[float] = None
    created_at: Optional[datetime] = None


class InstructorRatingUpdate(RequestModel):
    rating: float = Field(..., ge=0, le=5)


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserPublic

    # the web client reads the camelCase key
    @computed_field(alias="refreshToken")
    @property
    def refresh_token_camel(self) -> str:
        return self.refresh_token


class TokenRefreshResponse(BaseModel):
    success: bool = True
    message: str
    token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    success: bool = True
    data: UserPublic
