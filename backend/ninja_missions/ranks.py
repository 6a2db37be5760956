# backend/ninja_missions/ranks.py
"""
Rank scales.

Ninja ranks and mission rank requirements are two separate ordered
scales; they are only ever compared by position, never by name.
"""
from __future__ import annotations

from enum import Enum
from typing import Sequence

from ninja_missions.errors import DataCorruption


class NinjaRank(str, Enum):
    ACADEMY = "Academy"
    GENIN = "Genin"
    CHUNIN = "Chunin"
    JONIN = "Jonin"
    KAGE = "Kage"


class MissionRank(str, Enum):
    D = "D"
    C = "C"
    B = "B"
    A = "A"
    S = "S"


class MissionStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"


class RankScale:
    """An explicit ordered lookup table for one rank enumeration."""

    def __init__(self, name: str, members: Sequence[Enum]):
        if not members:
            raise ValueError("a rank scale needs at least one member")
        self.name = name
        self.members = tuple(members)
        self._index = {m: i for i, m in enumerate(self.members)}
        self._by_value = {m.value: m for m in self.members}

    def index(self, member) -> int:
        if isinstance(member, str) and not isinstance(member, Enum):
            member = self.parse(member)
        try:
            return self._index[member]
        except KeyError:
            raise DataCorruption(f"unknown {self.name} value: {member!r}") from None

    def parse(self, value: str):
        try:
            return self._by_value[value]
        except KeyError:
            raise DataCorruption(f"unknown {self.name} value: {value!r}") from None

    def __contains__(self, value) -> bool:
        return value in self._by_value or value in self._index

    def __iter__(self):
        return iter(self.members)


NINJA_RANKS = RankScale("ninja rank", list(NinjaRank))
MISSION_RANKS = RankScale("mission rank", list(MissionRank))


def is_eligible(
    ninja_rank,
    mission_rank,
    ninja_scale: RankScale = NINJA_RANKS,
    mission_scale: RankScale = MISSION_RANKS,
) -> bool:
    """True if a ninja of `ninja_rank` may take a mission requiring `mission_rank`."""
    return ninja_scale.index(ninja_rank) >= mission_scale.index(mission_rank)


def experience_for(reward: int) -> int:
    """XP granted on completion: a tenth of the reward, truncated."""
    return reward // 10
