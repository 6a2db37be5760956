# backend/ninja_missions/routers/auth.py
from fastapi import APIRouter, Depends

from ninja_missions.deps import get_identity
from ninja_missions.identity import IdentityService
from ninja_missions.schemas import AuthOut, LoginIn, RegisterIn

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthOut, status_code=201)
def register(payload: RegisterIn, identity: IdentityService = Depends(get_identity)):
    """Body: { "username": "...", "password": "...", "rank": "Genin" } (rank optional)"""
    token, ninja = identity.register(payload.username, payload.password, payload.rank)
    return AuthOut(token=token, ninja=ninja)


@router.post("/login", response_model=AuthOut)
def login(payload: LoginIn, identity: IdentityService = Depends(get_identity)):
    token, ninja = identity.login(payload.username, payload.password)
    return AuthOut(token=token, ninja=ninja)
