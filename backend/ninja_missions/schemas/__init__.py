# backend/ninja_missions/schemas/__init__.py

# Missions
from .mission import (
    MissionRecord,
    MissionView,
    AssignmentRecord,
    MissionQuery,
    MissionPage,
    ReportIn,
    ReportOut,
    MissionActionOut,
)

# Ninjas
from .ninja import (
    NinjaRecord,
    CallerIdentity,
    NinjaProfile,
    NinjaCounts,
    NinjaStats,
)

# Auth
from .auth import RegisterIn, LoginIn, AuthOut

__all__ = [
    "MissionRecord", "MissionView", "AssignmentRecord", "MissionQuery", "MissionPage",
    "ReportIn", "ReportOut", "MissionActionOut",
    "NinjaRecord", "CallerIdentity", "NinjaProfile", "NinjaCounts", "NinjaStats",
    "RegisterIn", "LoginIn", "AuthOut",
]
