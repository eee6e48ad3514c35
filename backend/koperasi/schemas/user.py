from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Literal

Role = Literal["admin", "member"]
MemberStatus = Literal["active", "inactive", "pending_verification", "suspended"]

class UserCreate(BaseModel):
    username: str
    password: str
    name: str
    member_number: str | None = None
    role: Role = "member"
    status: MemberStatus = "pending_verification"

    @field_validator("username", "name")
    @classmethod
    def required_trim(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("value is required")
        if len(v) > 64:
            raise ValueError("value too long")
        return v

    @field_validator("password")
    @classmethod
    def password_min(cls, v: str):
        v = str(v)
        if len(v) < 6:
            raise ValueError("password must be at least 6 characters")
        return v

    @field_validator("member_number")
    @classmethod
    def member_number_trim(cls, v: str | None):
        if v is None:
            return None
        v = v.strip()
        return v or None

class UserUpdate(BaseModel):
    name: str | None = None
    password: str | None = None
    role: Role | None = None
    status: MemberStatus | None = None

    @field_validator("password")
    @classmethod
    def password_min(cls, v: str | None):
        if v is None:
            return None
        v = str(v)
        if len(v) < 6:
            raise ValueError("password must be at least 6 characters")
        return v

class UserOut(BaseModel):
    id: int
    username: str
    name: str
    member_number: str | None
    role: str
    status: str
    verified_at: datetime | None
    created_at: datetime | None = None

    class Config:
        from_attributes = True
