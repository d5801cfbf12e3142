from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


UserRole = Literal["admin", "volunteer"]


class AdminLogin(BaseModel):
    username: str
    password: str


class VolunteerLogin(BaseModel):
    identifier: str


class Principal(BaseModel):
    subject: str
    role: UserRole
    name: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AuthResponse(Token):
    user: Principal
    message: str = "Authenticated"


class TokenPayload(BaseModel):
    sub: str
    role: UserRole
    name: str
    exp: int
