from pydantic import EmailStr, Field, field_validator
from datetime import datetime
from typing import Any, List, Optional

from schemas.user import CamelModel

# Schema for guard registration requests (built from multipart form fields)
class GuardCreate(CamelModel):
    user_name: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)
    residence: str = Field(min_length=1)
    description: str = Field(min_length=1)
    age: int = Field(ge=16, le=100)
    work_history: List[Any] = []

    @field_validator("user_name")
    @classmethod
    def normalize_user_name(cls, v: str) -> str:
        return v.strip().lower()

# Output schema for guard profile details, secrets never included
class GuardResponse(CamelModel):
    id: int = Field(serialization_alias="_id")
    user_name: str
    full_name: str
    email: str
    avatar: Optional[str] = None
    residence: str
    description: str
    age: int
    is_approved: bool
    work_percent: float
    work_history: List[Any] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# Range is checked in the route so the error message stays explicit
class WorkPercentUpdate(CamelModel):
    work_percent: Optional[float] = None

# Omitting isApproved toggles the current value
class ApprovalUpdate(CamelModel):
    is_approved: Optional[bool] = None
