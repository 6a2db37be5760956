# backend/ninja_missions/engine.py
"""
Mission lifecycle.

    Open --accept--> InProgress --report--> Completed
    InProgress --abandon--> Open

Every transition runs inside one store unit: the mission is locked first,
preconditions are checked against that locked state, then all writes for
the transition are made. A failure anywhere leaves the store untouched.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from ninja_missions.errors import Conflict, Forbidden, IsolationUnavailable, NotFound
from ninja_missions.ranks import (
    MISSION_RANKS,
    NINJA_RANKS,
    MissionStatus,
    RankScale,
    experience_for,
    is_eligible,
)
from ninja_missions.schemas import (
    CallerIdentity,
    MissionPage,
    MissionQuery,
    MissionRecord,
    NinjaStats,
    ReportIn,
)
from ninja_missions.store import MissionStore, MissionUnit

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MissionLifecycleEngine:
    def __init__(
        self,
        store: MissionStore,
        *,
        ninja_ranks: RankScale = NINJA_RANKS,
        mission_ranks: RankScale = MISSION_RANKS,
        clock: Callable[[], datetime] = _utcnow,
        max_page_size: Optional[int] = 100,
        require_isolation: bool = True,
    ):
        if not store.provides_isolation:
            if require_isolation:
                raise IsolationUnavailable(
                    f"{type(store).__name__} cannot serialize concurrent accepts of one mission"
                )
            logger.warning(
                f"[missions] {type(store).__name__} has no isolation between units: "
                "concurrent accepts of the same mission may both succeed"
            )
        self.store = store
        self.ninja_ranks = ninja_ranks
        self.mission_ranks = mission_ranks
        self.clock = clock
        self.max_page_size = max_page_size

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def list_missions(self, query: MissionQuery) -> MissionPage:
        if self.max_page_size and query.page_size > self.max_page_size:
            query = query.model_copy(update={"page_size": self.max_page_size})
        return self.store.list_missions(query)

    def ninja_stats(self, ninja_id: int) -> NinjaStats:
        stats = self.store.ninja_stats(ninja_id)
        if stats is None:
            raise NotFound("ninja not found")
        return stats

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def accept_mission(self, mission_id: int, ninja: CallerIdentity) -> MissionRecord:
        def work(unit: MissionUnit) -> MissionRecord:
            mission = unit.lock_mission(mission_id)
            if mission is None:
                raise NotFound("mission not found")
            if mission.status != MissionStatus.OPEN:
                raise Conflict("mission unavailable")
            if not is_eligible(ninja.rank, mission.rank_requirement, self.ninja_ranks, self.mission_ranks):
                raise Forbidden("rank insufficient")

            now = self.clock()
            updated = unit.set_mission_status(mission_id, MissionStatus.IN_PROGRESS, now)
            unit.add_assignment(mission_id, ninja.id, now)
            return updated

        try:
            mission = self.store.run_atomic(work)
        except (NotFound, Conflict, Forbidden) as exc:
            logger.info(f"[missions] accept rejected: mission={mission_id} ninja={ninja.id}: {exc.message}")
            raise
        logger.info(f"[missions] accepted: mission={mission_id} ninja={ninja.id}")
        return mission

    def submit_report(self, mission_id: int, ninja: CallerIdentity, report: ReportIn) -> int:
        """Complete an assigned mission and return the XP granted."""
        def work(unit: MissionUnit) -> int:
            mission = unit.lock_mission(mission_id)
            assignment = unit.get_assignment(mission_id, ninja.id) if mission is not None else None
            if assignment is None:
                raise NotFound("not assigned")
            if assignment.report_text is not None or mission.status == MissionStatus.COMPLETED:
                raise Conflict("already completed")

            xp_gain = experience_for(mission.reward)
            unit.set_mission_status(mission_id, MissionStatus.COMPLETED, self.clock())
            unit.record_report(mission_id, ninja.id, report.report_text, report.evidence_image_url)
            unit.increment_experience(ninja.id, xp_gain)
            return xp_gain

        try:
            xp_gain = self.store.run_atomic(work)
        except (NotFound, Conflict) as exc:
            logger.info(f"[missions] report rejected: mission={mission_id} ninja={ninja.id}: {exc.message}")
            raise
        logger.info(f"[missions] completed: mission={mission_id} ninja={ninja.id} xp=+{xp_gain}")
        return xp_gain

    def abandon_mission(self, mission_id: int, ninja: CallerIdentity) -> MissionRecord:
        def work(unit: MissionUnit) -> MissionRecord:
            mission = unit.lock_mission(mission_id)
            assignment = unit.get_assignment(mission_id, ninja.id) if mission is not None else None
            if assignment is None:
                raise NotFound("not assigned")
            if mission.status == MissionStatus.COMPLETED:
                raise Conflict("cannot abandon completed mission")

            unit.remove_assignment(mission_id, ninja.id)
            return unit.set_mission_status(mission_id, MissionStatus.OPEN, self.clock())

        try:
            mission = self.store.run_atomic(work)
        except (NotFound, Conflict) as exc:
            logger.info(f"[missions] abandon rejected: mission={mission_id} ninja={ninja.id}: {exc.message}")
            raise
        logger.info(f"[missions] abandoned: mission={mission_id} ninja={ninja.id}")
        return mission
