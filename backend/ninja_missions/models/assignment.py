# backend/ninja_missions/models/assignment.py
from datetime import datetime, timezone
from sqlalchemy import ForeignKey, DateTime, Text, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ninja_missions.db import Base


class Assignment(Base):
    __tablename__ = "assignments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # unique: at most one assignment row per mission
    mission_id: Mapped[int] = mapped_column(
        ForeignKey("missions.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    ninja_id: Mapped[int] = mapped_column(
        ForeignKey("ninjas.id", ondelete="CASCADE"), index=True, nullable=False
    )

    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    report_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    evidence_image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    mission = relationship("Mission")
    ninja = relationship("Ninja")
