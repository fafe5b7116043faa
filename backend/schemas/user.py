from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Literal, Optional

# Shared config: camelCase on the wire, snake_case in python, readable from ORM rows
class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

# Schema for user registration requests (built from multipart form fields)
class UserCreate(CamelModel):
    user_name: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)
    role: Literal["user", "admin"] = "user"

    @field_validator("user_name")
    @classmethod
    def normalize_user_name(cls, v: str) -> str:
        return v.strip().lower()

# Schema for login, either email or userName identifies the account
class LoginRequest(CamelModel):
    email: Optional[str] = None
    user_name: Optional[str] = None
    password: str = ""

# Refresh token may come in the body when cookies are unavailable
class RefreshRequest(CamelModel):
    refresh_token: Optional[str] = None

# Output schema for user profile details, secrets never included
class UserResponse(CamelModel):
    id: int = Field(serialization_alias="_id")
    user_name: str
    full_name: str
    email: str
    role: str
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# Payload returned by the login endpoints
class TokenPair(CamelModel):
    access_token: str
    refresh_token: str
