# krixflow/models/profile.py
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from krixflow.models.base import RequestModel


class AvailabilityStatus(str, Enum):
    OPEN_TO_OPPORTUNITIES = "OPEN_TO_OPPORTUNITIES"
    ACTIVELY_LOOKING = "ACTIVELY_LOOKING"
    NOT_LOOKING = "NOT_LOOKING"


class WorkType(str, Enum):
    REMOTE = "REMOTE"
    ONSITE = "ONSITE"
    HYBRID = "HYBRID"


class RecruiterType(str, Enum):
    INTERNAL = "INTERNAL"
    EXTERNAL = "EXTERNAL"
    AGENCY = "AGENCY"


class VerificationStatus(str, Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class CandidateProfileCreate(RequestModel):
    current_designation: str = Field(..., min_length=1)
    total_experience_years: float = Field(..., ge=0)
    expected_salary: float = Field(..., ge=0)
    availability_status: AvailabilityStatus
    work_type_preference: WorkType


class CandidateProfileUpdate(RequestModel):
    current_designation: Optional[str] = Field(None, min_length=1)
    total_experience_years: Optional[float] = Field(None, ge=0)
    expected_salary: Optional[float] = Field(None, ge=0)
    availability_status: Optional[AvailabilityStatus] = None
    work_type_preference: Optional[WorkType] = None


class CandidateProfileDB(BaseModel):
    id: str
    user_id: str
    current_designation: str
    total_experience_years: float
    expected_salary: float
    availability_status: AvailabilityStatus
    work_type_preference: WorkType
    profile_completion: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RecruiterProfileCreate(RequestModel):
    company_name: str = Field(..., min_length=1)
    recruiter_type: RecruiterType
    designation: str = Field(..., min_length=1)


class RecruiterProfileUpdate(RequestModel):
    company_name: Optional[str] = Field(None, min_length=1)
    recruiter_type: Optional[RecruiterType] = None
    designation: Optional[str] = Field(None, min_length=1)


class RecruiterProfileDB(BaseModel):
    id: str
    user_id: str
    company_name: str
    recruiter_type: RecruiterType
    designation: str
    is_verified: bool = False
    verification_status: VerificationStatus = VerificationStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
