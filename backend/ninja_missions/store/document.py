# backend/ninja_missions/store/document.py
"""
Whole-document record store.

All ninjas, missions and assignments live in one JSON file. A unit of work
reads the file, mutates an in-memory copy, and replaces the file once when
the unit returns; a unit that raises writes nothing.

Units are NOT isolated from each other: two units running at the same time
both read the same document and the last replace wins. Two concurrent
accepts of one Open mission can therefore both succeed. This store reports
provides_isolation = False and the engine refuses it unless the operator
opts in (ALLOW_UNISOLATED_STORE).
"""
from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional, Tuple, TypeVar

from ninja_missions.errors import Conflict, MissionError, NotFound, StorageUnavailable
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


def _empty() -> dict:
    return {"ninjas": [], "missions": [], "assignments": []}


def _iso(at: datetime) -> str:
    return at.isoformat()


def _next_id(rows: list) -> int:
    return max((r["id"] for r in rows), default=0) + 1


def _sort_key(row: dict):
    # created_at desc, id desc; parse so mixed offsets compare correctly
    return (datetime.fromisoformat(row["created_at"]), row["id"])


class DocumentMissionUnit(MissionUnit):
    def __init__(self, doc: dict):
        self.doc = doc

    def _mission(self, mission_id: int) -> Optional[dict]:
        return next((m for m in self.doc["missions"] if m["id"] == mission_id), None)

    def _assignment(self, mission_id: int, ninja_id: Optional[int]) -> Optional[dict]:
        for a in self.doc["assignments"]:
            if a["mission_id"] == mission_id and (ninja_id is None or a["ninja_id"] == ninja_id):
                return a
        return None

    def lock_mission(self, mission_id: int) -> Optional[MissionRecord]:
        # no lock is taken: see module docstring
        row = self._mission(mission_id)
        return to_record(MissionRecord, row) if row is not None else None

    def get_assignment(self, mission_id: int, ninja_id: Optional[int] = None) -> Optional[AssignmentRecord]:
        row = self._assignment(mission_id, ninja_id)
        return to_record(AssignmentRecord, row) if row is not None else None

    def set_mission_status(self, mission_id: int, status: MissionStatus, at: datetime) -> MissionRecord:
        row = self._mission(mission_id)
        if row is None:
            raise NotFound("mission not found")
        row["status"] = status.value
        row["updated_at"] = _iso(at)
        return to_record(MissionRecord, row)

    def add_assignment(self, mission_id: int, ninja_id: int, at: datetime) -> AssignmentRecord:
        if not any(n["id"] == ninja_id for n in self.doc["ninjas"]):
            raise NotFound("ninja not found")
        if self._assignment(mission_id, None) is not None:
            raise Conflict("conflicting concurrent update")
        row = {
            "mission_id": mission_id,
            "ninja_id": ninja_id,
            "assigned_at": _iso(at),
            "report_text": None,
            "evidence_image_url": None,
        }
        self.doc["assignments"].append(row)
        return to_record(AssignmentRecord, row)

    def record_report(
        self, mission_id: int, ninja_id: int, report_text: str, evidence_image_url: Optional[str]
    ) -> None:
        row = self._assignment(mission_id, ninja_id)
        if row is None:
            raise NotFound("not assigned")
        row["report_text"] = report_text
        row["evidence_image_url"] = evidence_image_url

    def remove_assignment(self, mission_id: int, ninja_id: int) -> None:
        row = self._assignment(mission_id, ninja_id)
        if row is None:
            raise NotFound("not assigned")
        self.doc["assignments"].remove(row)

    def increment_experience(self, ninja_id: int, amount: int) -> int:
        row = next((n for n in self.doc["ninjas"] if n["id"] == ninja_id), None)
        if row is None:
            raise NotFound("ninja not found")
        row["experience_points"] = row.get("experience_points", 0) + amount
        return row["experience_points"]


class DocumentMissionStore(MissionStore):
    provides_isolation = False

    def __init__(self, path: Path | str = "data.json"):
        self.path = Path(path)

    # --- file access ------------------------------------------------------
    def _load(self) -> dict:
        if not self.path.exists():
            return _empty()
        try:
            doc = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.exception(f"[store] cannot read {self.path}")
            raise StorageUnavailable() from exc
        if not isinstance(doc, dict):
            logger.error(f"[store] {self.path} does not hold a JSON object")
            raise StorageUnavailable()
        for key in ("ninjas", "missions", "assignments"):
            if not isinstance(doc.setdefault(key, []), list):
                logger.error(f"[store] {self.path}: '{key}' is not a list")
                raise StorageUnavailable()
        return doc

    def _read(self, fn: Callable[[dict], T]) -> T:
        doc = self._load()
        try:
            return fn(doc)
        except MissionError:
            raise
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.exception("[store] malformed document during read")
            raise StorageUnavailable() from exc

    def _save(self, doc: dict) -> None:
        """Replace the file in one step so readers never see a half-written document."""
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.path.parent, prefix=".data-", suffix=".json", delete=False
            ) as tmp:
                tmp_name = tmp.name
                json.dump(doc, tmp, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.exception(f"[store] cannot write {self.path}")
            raise StorageUnavailable() from exc

    def run_atomic(self, work: Callable[[MissionUnit], T]) -> T:
        doc = self._load()
        working = copy.deepcopy(doc)
        try:
            result = work(DocumentMissionUnit(working))
        except MissionError:
            raise
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.exception("[store] malformed document during unit")
            raise StorageUnavailable() from exc
        self._save(working)
        return result

    # --- reads ------------------------------------------------------------
    def read_mission(self, mission_id: int) -> Optional[MissionRecord]:
        return self._read(lambda doc: DocumentMissionUnit(doc).lock_mission(mission_id))

    def read_assignment(self, mission_id: int, ninja_id: Optional[int] = None) -> Optional[AssignmentRecord]:
        return self._read(lambda doc: DocumentMissionUnit(doc).get_assignment(mission_id, ninja_id))

    def list_missions(self, query: MissionQuery) -> MissionPage:
        def q(doc: dict) -> MissionPage:
            ninjas = {n["id"]: n for n in doc["ninjas"]}
            assignees = {a["mission_id"]: ninjas.get(a["ninja_id"]) for a in doc["assignments"]}

            rows = [
                m for m in doc["missions"]
                if (query.rank_requirement is None or m["rank_requirement"] == query.rank_requirement.value)
                and (query.status is None or m["status"] == query.status.value)
            ]
            rows.sort(key=_sort_key, reverse=True)
            window = rows[query.offset:query.offset + query.page_size]

            data = []
            for m in window:
                assignee = assignees.get(m["id"])
                data.append(to_record(MissionView, {
                    **m,
                    "accepted_by_ninja_name": assignee["username"] if assignee else None,
                    "accepted_by_ninja_avatar": assignee.get("avatar_url") if assignee else None,
                }))
            return MissionPage(total=len(rows), page=query.page, limit=query.page_size, data=data)

        return self._read(q)

    def read_ninja(self, ninja_id: int) -> Optional[NinjaRecord]:
        def q(doc: dict):
            row = next((n for n in doc["ninjas"] if n["id"] == ninja_id), None)
            return to_record(NinjaRecord, row) if row is not None else None
        return self._read(q)

    def find_credentials(self, username: str) -> Optional[Tuple[NinjaRecord, str]]:
        def q(doc: dict):
            row = next((n for n in doc["ninjas"] if n["username"] == username), None)
            return (to_record(NinjaRecord, row), row["password_hash"]) if row is not None else None
        return self._read(q)

    def ninja_stats(self, ninja_id: int) -> Optional[NinjaStats]:
        def q(doc: dict):
            ninja = next((n for n in doc["ninjas"] if n["id"] == ninja_id), None)
            if ninja is None:
                return None
            status_by_id = {m["id"]: m["status"] for m in doc["missions"]}
            mine = [a for a in doc["assignments"] if a["ninja_id"] == ninja_id]
            completed = sum(1 for a in mine if status_by_id.get(a["mission_id"]) == MissionStatus.COMPLETED.value)
            return NinjaStats(
                profile=to_record(NinjaProfile, ninja),
                stats=NinjaCounts(total_assignments=len(mine), completed_missions=completed),
            )
        return self._read(q)

    # --- out-of-band writes -----------------------------------------------
    def create_ninja(
        self, username: str, password_hash: str, rank: NinjaRank, avatar_url: Optional[str]
    ) -> NinjaRecord:
        def work(unit: DocumentMissionUnit) -> NinjaRecord:
            ninjas = unit.doc["ninjas"]
            if any(n["username"] == username for n in ninjas):
                raise Conflict("username already taken")
            row = {
                "id": _next_id(ninjas),
                "username": username,
                "password_hash": password_hash,
                "rank": rank.value,
                "experience_points": 0,
                "avatar_url": avatar_url,
            }
            ninjas.append(row)
            return to_record(NinjaRecord, row)
        return self.run_atomic(work)

    def add_mission(
        self,
        title: str,
        description: str,
        rank_requirement: MissionRank,
        reward: int,
        created_at: Optional[datetime] = None,
    ) -> MissionRecord:
        at = _iso(created_at or datetime.now(timezone.utc))

        def work(unit: DocumentMissionUnit) -> MissionRecord:
            missions = unit.doc["missions"]
            row = {
                "id": _next_id(missions),
                "title": title,
                "description": description,
                "rank_requirement": rank_requirement.value,
                "reward": reward,
                "status": MissionStatus.OPEN.value,
                "created_at": at,
                "updated_at": at,
            }
            missions.append(row)
            return to_record(MissionRecord, row)
        return self.run_atomic(work)

    def healthcheck(self) -> dict:
        self._load()
        return {"status": "ok"}
