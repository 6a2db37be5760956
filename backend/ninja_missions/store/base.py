# backend/ninja_missions/store/base.py
"""
Persistence adapter contract.

Separates persistence from the lifecycle rules so the engine can run
against either backend:
- SqlMissionStore: transactional, row-locked units (production)
- DocumentMissionStore: one JSON record file, no isolation between units
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ninja_missions.errors import DataCorruption
from ninja_missions.ranks import MissionRank, MissionStatus, NinjaRank
from ninja_missions.schemas import (
    AssignmentRecord,
    MissionPage,
    MissionQuery,
    MissionRecord,
    NinjaRecord,
    NinjaStats,
)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


def to_record(model: Type[M], obj) -> M:
    """Validate a stored row/document into a record; unknown enum values are corruption."""
    try:
        return model.model_validate(obj)
    except ValidationError as exc:
        raise DataCorruption(f"stored {model.__name__} failed validation: {exc.errors()[0]['msg']}") from exc


class MissionUnit(ABC):
    """Reads and writes available inside one atomic unit of work."""

    @abstractmethod
    def lock_mission(self, mission_id: int) -> Optional[MissionRecord]:
        """Load a mission and hold it exclusively until the unit ends."""

    @abstractmethod
    def get_assignment(self, mission_id: int, ninja_id: Optional[int] = None) -> Optional[AssignmentRecord]:
        ...

    @abstractmethod
    def set_mission_status(self, mission_id: int, status: MissionStatus, at: datetime) -> MissionRecord:
        ...

    @abstractmethod
    def add_assignment(self, mission_id: int, ninja_id: int, at: datetime) -> AssignmentRecord:
        ...

    @abstractmethod
    def record_report(
        self, mission_id: int, ninja_id: int, report_text: str, evidence_image_url: Optional[str]
    ) -> None:
        ...

    @abstractmethod
    def remove_assignment(self, mission_id: int, ninja_id: int) -> None:
        ...

    @abstractmethod
    def increment_experience(self, ninja_id: int, amount: int) -> int:
        """Add `amount` XP and return the new total."""


class MissionStore(ABC):
    # True only if lock_mission really excludes concurrent units
    provides_isolation: bool = False

    @abstractmethod
    def run_atomic(self, work: Callable[[MissionUnit], T]) -> T:
        """
        Run `work` as one unit: all of its writes land together or not at all.

        Any exception raised by `work` rolls the unit back and propagates.
        """

    # --- reads ------------------------------------------------------------
    @abstractmethod
    def read_mission(self, mission_id: int) -> Optional[MissionRecord]:
        ...

    @abstractmethod
    def read_assignment(self, mission_id: int, ninja_id: Optional[int] = None) -> Optional[AssignmentRecord]:
        ...

    @abstractmethod
    def list_missions(self, query: MissionQuery) -> MissionPage:
        ...

    @abstractmethod
    def read_ninja(self, ninja_id: int) -> Optional[NinjaRecord]:
        ...

    @abstractmethod
    def find_credentials(self, username: str) -> Optional[Tuple[NinjaRecord, str]]:
        """Return the ninja and its credential hash, for the identity collaborator."""

    @abstractmethod
    def ninja_stats(self, ninja_id: int) -> Optional[NinjaStats]:
        ...

    # --- out-of-band writes (registration, seeding) -----------------------
    @abstractmethod
    def create_ninja(
        self, username: str, password_hash: str, rank: NinjaRank, avatar_url: Optional[str]
    ) -> NinjaRecord:
        """Insert a ninja; a taken username raises Conflict."""

    @abstractmethod
    def add_mission(
        self,
        title: str,
        description: str,
        rank_requirement: MissionRank,
        reward: int,
        created_at: Optional[datetime] = None,
    ) -> MissionRecord:
        ...

    def healthcheck(self) -> dict:
        return {"status": "ok"}
