# backend/ninja_missions/main.py
from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ninja_missions.config import Settings, load_settings
from ninja_missions.engine import MissionLifecycleEngine
from ninja_missions.errors import MissionError, mission_error_handler
from ninja_missions.identity import IdentityService
from ninja_missions.store import MissionStore, build_store

from ninja_missions.routers.auth import router as auth_router
from ninja_missions.routers.missions import router as missions_router
from ninja_missions.routers.ninjas import router as ninjas_router


def build_app(settings: Optional[Settings] = None, store: Optional[MissionStore] = None) -> FastAPI:
    settings = settings or load_settings()
    store = store or build_store(settings)

    # fails here, at startup, if the store cannot isolate concurrent accepts
    engine = MissionLifecycleEngine(
        store,
        max_page_size=settings.max_page_size,
        require_isolation=not settings.allow_unisolated_store,
    )

    app = FastAPI(title="Ninja Missions API")
    app.state.settings = settings
    app.state.store = store
    app.state.engine = engine
    app.state.identity = IdentityService(store, settings.jwt_secret, settings.jwt_expire_hours)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_origin],
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1|0\.0\.0\.0)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )
    app.add_exception_handler(MissionError, mission_error_handler)

    # Health
    @app.get("/health")
    def health():
        return {"ok": True}

    @app.get("/health/store")
    def health_store():
        return store.healthcheck()

    app.include_router(auth_router)
    app.include_router(missions_router)
    app.include_router(ninjas_router)

    return app
