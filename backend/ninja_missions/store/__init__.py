# backend/ninja_missions/store/__init__.py
from __future__ import annotations

import logging

from ninja_missions.config import Settings
from ninja_missions.db import make_engine
from .base import MissionStore, MissionUnit, to_record
from .sql import SqlMissionStore
from .document import DocumentMissionStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> MissionStore:
    """Construct the configured backend; the caller owns the returned instance."""
    if settings.store_backend == "document":
        logger.info(f"[store] using document store at {settings.document_path}")
        return DocumentMissionStore(settings.document_path)
    logger.info("[store] using relational store")
    return SqlMissionStore(make_engine(settings.database_url))


__all__ = [
    "MissionStore",
    "MissionUnit",
    "SqlMissionStore",
    "DocumentMissionStore",
    "build_store",
    "to_record",
]
