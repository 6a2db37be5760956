# backend/ninja_missions/store/sql.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple, TypeVar

from sqlalchemy import select, update, delete, func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ninja_missions.db import Base, make_session_factory, healthcheck
from ninja_missions.errors import Conflict, MissionError, NotFound, StorageUnavailable
from ninja_missions.models import Assignment, Mission, Ninja
from ninja_missions.ranks import MissionRank, MissionStatus, NinjaRank
from ninja_missions.schemas import (
    AssignmentRecord,
    MissionPage,
    MissionQuery,
    MissionRecord,
    MissionView,
    NinjaCounts,
    NinjaProfile,
    NinjaRecord,
    NinjaStats,
)
from .base import MissionStore, MissionUnit, to_record

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SqlMissionUnit(MissionUnit):
    def __init__(self, session: Session):
        self.session = session

    def _mission_row(self, mission_id: int) -> Mission:
        row = self.session.get(Mission, mission_id)
        if row is None:
            raise NotFound("mission not found")
        return row

    def _assignment_query(self, mission_id: int, ninja_id: Optional[int]):
        q = select(Assignment).where(Assignment.mission_id == mission_id)
        if ninja_id is not None:
            q = q.where(Assignment.ninja_id == ninja_id)
        return q

    def lock_mission(self, mission_id: int) -> Optional[MissionRecord]:
        row = self.session.execute(
            select(Mission).where(Mission.id == mission_id).with_for_update()
        ).scalar_one_or_none()
        return to_record(MissionRecord, row) if row is not None else None

    def get_assignment(self, mission_id: int, ninja_id: Optional[int] = None) -> Optional[AssignmentRecord]:
        row = self.session.execute(self._assignment_query(mission_id, ninja_id)).scalars().first()
        return to_record(AssignmentRecord, row) if row is not None else None

    def set_mission_status(self, mission_id: int, status: MissionStatus, at: datetime) -> MissionRecord:
        row = self._mission_row(mission_id)
        row.status = status.value
        row.updated_at = at
        self.session.flush()
        return to_record(MissionRecord, row)

    def add_assignment(self, mission_id: int, ninja_id: int, at: datetime) -> AssignmentRecord:
        # a vanished ninja would otherwise surface as an IntegrityError -> Conflict
        if self.session.get(Ninja, ninja_id) is None:
            raise NotFound("ninja not found")
        row = Assignment(mission_id=mission_id, ninja_id=ninja_id, assigned_at=at)
        self.session.add(row)
        self.session.flush()
        return to_record(AssignmentRecord, row)

    def record_report(
        self, mission_id: int, ninja_id: int, report_text: str, evidence_image_url: Optional[str]
    ) -> None:
        res = self.session.execute(
            update(Assignment)
            .where(Assignment.mission_id == mission_id, Assignment.ninja_id == ninja_id)
            .values(report_text=report_text, evidence_image_url=evidence_image_url)
        )
        if res.rowcount == 0:
            raise NotFound("not assigned")

    def remove_assignment(self, mission_id: int, ninja_id: int) -> None:
        res = self.session.execute(
            delete(Assignment).where(Assignment.mission_id == mission_id, Assignment.ninja_id == ninja_id)
        )
        if res.rowcount == 0:
            raise NotFound("not assigned")

    def increment_experience(self, ninja_id: int, amount: int) -> int:
        res = self.session.execute(
            update(Ninja)
            .where(Ninja.id == ninja_id)
            .values(experience_points=Ninja.experience_points + amount)
        )
        if res.rowcount == 0:
            raise NotFound("ninja not found")
        return self.session.scalar(select(Ninja.experience_points).where(Ninja.id == ninja_id))


class SqlMissionStore(MissionStore):
    """Relational backend: each unit is one transaction holding a row lock on its mission."""

    provides_isolation = True

    def __init__(self, engine: Engine, session_factory: Optional[sessionmaker] = None):
        self.engine = engine
        self._session_factory = session_factory or make_session_factory(engine)

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def run_atomic(self, work: Callable[[MissionUnit], T]) -> T:
        try:
            with self._session_factory() as session, session.begin():
                return work(SqlMissionUnit(session))
        except MissionError:
            raise
        except IntegrityError as exc:
            logger.warning(f"[store] unit rejected by constraint: {exc.orig}")
            raise Conflict("conflicting concurrent update") from exc
        except SQLAlchemyError as exc:
            logger.exception("[store] unit failed; rolled back")
            raise StorageUnavailable() from exc

    def _read(self, fn: Callable[[Session], T]) -> T:
        try:
            with self._session_factory() as session:
                return fn(session)
        except SQLAlchemyError as exc:
            logger.exception("[store] read failed")
            raise StorageUnavailable() from exc

    # --- reads ------------------------------------------------------------
    def read_mission(self, mission_id: int) -> Optional[MissionRecord]:
        def q(s: Session):
            row = s.get(Mission, mission_id)
            return to_record(MissionRecord, row) if row is not None else None
        return self._read(q)

    def read_assignment(self, mission_id: int, ninja_id: Optional[int] = None) -> Optional[AssignmentRecord]:
        return self._read(lambda s: SqlMissionUnit(s).get_assignment(mission_id, ninja_id))

    def list_missions(self, query: MissionQuery) -> MissionPage:
        conds = []
        if query.rank_requirement is not None:
            conds.append(Mission.rank_requirement == query.rank_requirement.value)
        if query.status is not None:
            conds.append(Mission.status == query.status.value)

        def q(s: Session) -> MissionPage:
            total = s.scalar(select(func.count()).select_from(Mission).where(*conds))
            rows = s.execute(
                select(Mission, Ninja.username, Ninja.avatar_url)
                .outerjoin(Assignment, Assignment.mission_id == Mission.id)
                .outerjoin(Ninja, Ninja.id == Assignment.ninja_id)
                .where(*conds)
                .order_by(Mission.created_at.desc(), Mission.id.desc())
                .offset(query.offset)
                .limit(query.page_size)
            ).all()
            data = [
                to_record(MissionView, m).model_copy(
                    update={"accepted_by_ninja_name": name, "accepted_by_ninja_avatar": avatar}
                )
                for m, name, avatar in rows
            ]
            return MissionPage(total=total or 0, page=query.page, limit=query.page_size, data=data)

        return self._read(q)

    def read_ninja(self, ninja_id: int) -> Optional[NinjaRecord]:
        def q(s: Session):
            row = s.get(Ninja, ninja_id)
            return to_record(NinjaRecord, row) if row is not None else None
        return self._read(q)

    def find_credentials(self, username: str) -> Optional[Tuple[NinjaRecord, str]]:
        def q(s: Session):
            row = s.execute(select(Ninja).where(Ninja.username == username)).scalar_one_or_none()
            return (to_record(NinjaRecord, row), row.password_hash) if row is not None else None
        return self._read(q)

    def ninja_stats(self, ninja_id: int) -> Optional[NinjaStats]:
        def q(s: Session):
            ninja = s.get(Ninja, ninja_id)
            if ninja is None:
                return None
            total = s.scalar(
                select(func.count()).select_from(Assignment).where(Assignment.ninja_id == ninja_id)
            )
            completed = s.scalar(
                select(func.count())
                .select_from(Assignment)
                .join(Mission, Mission.id == Assignment.mission_id)
                .where(Assignment.ninja_id == ninja_id, Mission.status == MissionStatus.COMPLETED.value)
            )
            return NinjaStats(
                profile=to_record(NinjaProfile, ninja),
                stats=NinjaCounts(total_assignments=total or 0, completed_missions=completed or 0),
            )
        return self._read(q)

    # --- out-of-band writes -----------------------------------------------
    def create_ninja(
        self, username: str, password_hash: str, rank: NinjaRank, avatar_url: Optional[str]
    ) -> NinjaRecord:
        try:
            with self._session_factory() as s, s.begin():
                row = Ninja(username=username, password_hash=password_hash, rank=rank.value, avatar_url=avatar_url)
                s.add(row)
                s.flush()
                return to_record(NinjaRecord, row)
        except IntegrityError as exc:
            raise Conflict("username already taken") from exc
        except SQLAlchemyError as exc:
            logger.exception("[store] create_ninja failed")
            raise StorageUnavailable() from exc

    def add_mission(
        self,
        title: str,
        description: str,
        rank_requirement: MissionRank,
        reward: int,
        created_at: Optional[datetime] = None,
    ) -> MissionRecord:
        at = created_at or datetime.now(timezone.utc)
        try:
            with self._session_factory() as s, s.begin():
                row = Mission(
                    title=title,
                    description=description,
                    rank_requirement=rank_requirement.value,
                    reward=reward,
                    status=MissionStatus.OPEN.value,
                    created_at=at,
                    updated_at=at,
                )
                s.add(row)
                s.flush()
                return to_record(MissionRecord, row)
        except SQLAlchemyError as exc:
            logger.exception("[store] add_mission failed")
            raise StorageUnavailable() from exc

    def healthcheck(self) -> dict:
        try:
            return healthcheck(self.engine)
        except SQLAlchemyError as exc:
            logger.exception("[store] healthcheck failed")
            raise StorageUnavailable() from exc
