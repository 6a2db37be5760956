# backend/ninja_missions/schemas/ninja.py
from typing import Optional

from pydantic import BaseModel

from ninja_missions.ranks import NinjaRank
from .base import CamelModel


class NinjaRecord(CamelModel):
    id: int
    username: str
    rank: NinjaRank
    experience_points: int = 0
    avatar_url: Optional[str] = None


class CallerIdentity(BaseModel):
    """The acting ninja as resolved from a bearer token."""
    id: int
    username: str
    rank: NinjaRank


class NinjaProfile(CamelModel):
    username: str
    rank: NinjaRank
    experience_points: int
    avatar_url: Optional[str] = None


class NinjaCounts(CamelModel):
    total_assignments: int
    completed_missions: int


class NinjaStats(CamelModel):
    profile: NinjaProfile
    stats: NinjaCounts
