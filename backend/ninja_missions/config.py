# backend/ninja_missions/config.py
from __future__ import annotations

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    database_url: str = "postgresql+psycopg://ninja:devpass@db:5432/missions"
    store_backend: Literal["sql", "document"] = "sql"
    document_path: str = "data.json"
    # the document store cannot serialize concurrent accepts; opt in explicitly
    allow_unisolated_store: bool = False
    jwt_secret: str = "konoha-secret-key"
    jwt_expire_hours: int = 24
    frontend_origin: str = "http://localhost:5173"
    max_page_size: int = 100
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read settings from the environment (and a .env file, if present)."""
    return Settings(
        database_url=os.getenv("DATABASE_URL", Settings.model_fields["database_url"].default),
        store_backend=os.getenv("MISSION_STORE", "sql").strip().lower(),
        document_path=os.getenv("DOCUMENT_STORE_PATH", "data.json"),
        allow_unisolated_store=_flag("ALLOW_UNISOLATED_STORE"),
        jwt_secret=os.getenv("JWT_SECRET", "konoha-secret-key"),
        jwt_expire_hours=int(os.getenv("JWT_EXPIRE_HOURS", "24")),
        frontend_origin=os.getenv("FRONTEND_ORIGIN", "http://localhost:5173"),
        max_page_size=int(os.getenv("MAX_PAGE_SIZE", "100")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
