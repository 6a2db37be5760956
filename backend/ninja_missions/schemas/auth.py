# backend/ninja_missions/schemas/auth.py
from typing import Optional

from pydantic import BaseModel

from .ninja import NinjaRecord


class RegisterIn(BaseModel):
    # presence is checked by the route so that a missing field is a 400, like login
    username: Optional[str] = None
    password: Optional[str] = None
    rank: Optional[str] = None


class LoginIn(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class AuthOut(BaseModel):
    token: str
    ninja: NinjaRecord
