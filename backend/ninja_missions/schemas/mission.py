# backend/ninja_missions/schemas/mission.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ninja_missions.ranks import MissionRank, MissionStatus
from .base import CamelModel


class MissionRecord(CamelModel):
    id: int
    title: str
    description: str = ""
    rank_requirement: MissionRank
    reward: int
    status: MissionStatus
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        # SQLite hands back naive datetimes; everything is stored as UTC
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)


class MissionView(MissionRecord):
    """A mission plus its assignee, when one exists."""
    accepted_by_ninja_name: Optional[str] = None
    accepted_by_ninja_avatar: Optional[str] = None


class AssignmentRecord(CamelModel):
    mission_id: int
    ninja_id: int
    assigned_at: datetime
    report_text: Optional[str] = None
    evidence_image_url: Optional[str] = None

    @field_validator("assigned_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)


class MissionQuery(BaseModel):
    rank_requirement: Optional[MissionRank] = None
    status: Optional[MissionStatus] = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class MissionPage(CamelModel):
    total: int
    page: int
    limit: int
    data: List[MissionView]


class ReportIn(CamelModel):
    report_text: str
    evidence_image_url: Optional[str] = None

    @field_validator("report_text")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("reportText must not be blank")
        return v


class ReportOut(CamelModel):
    message: str
    experience_gained: int


class MissionActionOut(CamelModel):
    message: str
    mission: MissionRecord
