# backend/ninja_missions/routers/ninjas.py
from fastapi import APIRouter, Depends

from ninja_missions.deps import get_current_ninja, get_engine
from ninja_missions.engine import MissionLifecycleEngine
from ninja_missions.schemas import CallerIdentity, NinjaStats

router = APIRouter(prefix="/ninjas", tags=["ninjas"])


@router.get("/me/stats", response_model=NinjaStats)
def my_stats(
    engine: MissionLifecycleEngine = Depends(get_engine),
    ninja: CallerIdentity = Depends(get_current_ninja),
):
    return engine.ninja_stats(ninja.id)
