from pydantic import Field
from datetime import datetime
from typing import Optional

from schemas.user import CamelModel
from schemas.guard import GuardResponse

# Input schema for assigning a guard to a post
class LocationCreate(CamelModel):
    guard_id: int
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: Optional[str] = None

# Partial update of an existing post
class LocationUpdate(CamelModel):
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    address: Optional[str] = None

class LocationResponse(CamelModel):
    id: int = Field(serialization_alias="_id")
    guard_id: int = Field(validation_alias="guard_id", serialization_alias="guard")
    latitude: float
    longitude: float
    address: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# Post joined with the guard stationed there
class DeployedLocation(LocationResponse):
    guard_details: GuardResponse = Field(validation_alias="guard", serialization_alias="guardDetails")

# Live position reported by a guard
class LiveLocationUpdate(CamelModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

class LiveLocationResponse(CamelModel):
    id: int = Field(serialization_alias="_id")
    guard_id: int = Field(validation_alias="guard_id", serialization_alias="guard")
    latitude: float
    longitude: float
    updated_at: Optional[datetime] = None

class LiveLocationWithGuard(LiveLocationResponse):
    guard_details: GuardResponse = Field(validation_alias="guard", serialization_alias="guardDetails")
