# backend/ninja_missions/routers/missions.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ninja_missions.deps import get_current_ninja, get_engine
from ninja_missions.engine import MissionLifecycleEngine
from ninja_missions.ranks import MissionRank, MissionStatus
from ninja_missions.schemas import (
    CallerIdentity,
    MissionActionOut,
    MissionPage,
    MissionQuery,
    ReportIn,
    ReportOut,
)

router = APIRouter(prefix="/missions", tags=["missions"])


@router.get("", response_model=MissionPage)
def list_missions(
    rank: Optional[MissionRank] = Query(None, description="Mission rank requirement (D..S)"),
    status: Optional[MissionStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    engine: MissionLifecycleEngine = Depends(get_engine),
    _ninja: CallerIdentity = Depends(get_current_ninja),
):
    """
    GET /missions
    GET /missions?rank=C&status=Open&page=2&limit=10
    Newest first; each mission carries its assignee's name/avatar when taken.
    """
    query = MissionQuery(rank_requirement=rank, status=status, page=page, page_size=limit)
    return engine.list_missions(query)


@router.patch("/{mission_id}/accept", response_model=MissionActionOut)
def accept_mission(
    mission_id: int,
    engine: MissionLifecycleEngine = Depends(get_engine),
    ninja: CallerIdentity = Depends(get_current_ninja),
):
    mission = engine.accept_mission(mission_id, ninja)
    return MissionActionOut(message="Mission accepted", mission=mission)


@router.post("/{mission_id}/report", response_model=ReportOut)
def submit_report(
    mission_id: int,
    payload: ReportIn,
    engine: MissionLifecycleEngine = Depends(get_engine),
    ninja: CallerIdentity = Depends(get_current_ninja),
):
    """
    POST /missions/{id}/report
    Body: { "reportText": "...", "evidenceImageUrl": "https://..." }
    """
    xp = engine.submit_report(mission_id, ninja, payload)
    return ReportOut(message="Report submitted", experience_gained=xp)


@router.delete("/{mission_id}/abandon", response_model=MissionActionOut)
def abandon_mission(
    mission_id: int,
    engine: MissionLifecycleEngine = Depends(get_engine),
    ninja: CallerIdentity = Depends(get_current_ninja),
):
    mission = engine.abandon_mission(mission_id, ninja)
    return MissionActionOut(message="Mission abandoned", mission=mission)
