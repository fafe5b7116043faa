from pydantic import Field
from datetime import datetime
from typing import Optional

from schemas.user import CamelModel
from schemas.guard import GuardResponse

class ComplainCreate(CamelModel):
    complain: Optional[str] = None

class AppreciationCreate(CamelModel):
    message: Optional[str] = None

class ComplainResponse(CamelModel):
    id: int = Field(serialization_alias="_id")
    guard_id: int = Field(validation_alias="guard_id", serialization_alias="guard")
    user_id: Optional[int] = Field(None, validation_alias="user_id", serialization_alias="user")
    complain: str
    created_at: Optional[datetime] = None

class AppreciationResponse(CamelModel):
    id: int = Field(serialization_alias="_id")
    guard_id: int = Field(validation_alias="guard_id", serialization_alias="guard")
    user_id: Optional[int] = Field(None, validation_alias="user_id", serialization_alias="user")
    message: str
    created_at: Optional[datetime] = None

# Feedback joined with the guard it concerns (admin listings)
class ComplainWithGuard(ComplainResponse):
    guard_details: GuardResponse = Field(validation_alias="guard", serialization_alias="guardDetails")

class AppreciationWithGuard(AppreciationResponse):
    guard_details: GuardResponse = Field(validation_alias="guard", serialization_alias="guardDetails")
