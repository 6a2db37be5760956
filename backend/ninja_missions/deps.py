# backend/ninja_missions/deps.py
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ninja_missions.engine import MissionLifecycleEngine
from ninja_missions.errors import Unauthenticated
from ninja_missions.identity import IdentityService
from ninja_missions.schemas import CallerIdentity

bearer = HTTPBearer(auto_error=False)


# FastAPI dependencies: the engine and identity service are owned by the app
def get_engine(request: Request) -> MissionLifecycleEngine:
    return request.app.state.engine


def get_identity(request: Request) -> IdentityService:
    return request.app.state.identity


def get_current_ninja(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    identity: IdentityService = Depends(get_identity),
) -> CallerIdentity:
    if credentials is None:
        raise Unauthenticated()
    return identity.resolve_caller(credentials.credentials)
