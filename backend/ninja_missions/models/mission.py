# backend/ninja_missions/models/mission.py
from datetime import datetime, timezone
from sqlalchemy import String, Integer, Text, DateTime, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from ninja_missions.db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Mission(Base):
    __tablename__ = "missions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # rank_requirement / status are plain text; see ninja_missions.ranks
    rank_requirement: Mapped[str] = mapped_column(String(4), nullable=False)
    reward: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="Open")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("reward > 0", name="ck_missions_reward_positive"),
        Index("ix_missions_created", "created_at", "id"),
        Index("ix_missions_rank_status", "rank_requirement", "status"),
    )
