from __future__ import annotations

from pydantic import BaseModel, Field


class LoginIn(BaseModel):
    email: str
    password: str


class RegisterIn(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=6)


class AdminOut(BaseModel):
    id: int
    name: str
    email: str
    role: str

    class Config:
        from_attributes = True


class AuthOut(BaseModel):
    success: bool = True
    token: str
    admin: AdminOut


class MeOut(BaseModel):
    success: bool = True
    admin: AdminOut
