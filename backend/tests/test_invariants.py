"""
Randomized operation sequences.

After every accept/report/abandon (successful or rejected) the store must
satisfy:
- Open        <=> no assignment row
- InProgress  <=> one assignment row without a report
- Completed   <=> one assignment row with a report, and its ninja was paid
                  floor(reward / 10) exactly once
- every assignee's rank position >= the mission's rank position
"""
import random

import pytest

from ninja_missions.errors import MissionError
from ninja_missions.ranks import MISSION_RANKS, NINJA_RANKS, MissionRank, MissionStatus, NinjaRank, experience_for
from ninja_missions.schemas import MissionQuery, ReportIn


def check_invariants(store, missions, ninjas):
    earned = {n.id: 0 for n in ninjas}
    page = store.list_missions(MissionQuery(page_size=len(missions) + 1))
    assert page.total == len(missions)

    for m in page.data:
        assignment = store.read_assignment(m.id)
        if m.status == MissionStatus.OPEN:
            assert assignment is None
            assert m.accepted_by_ninja_name is None
            continue

        assert assignment is not None
        if m.status == MissionStatus.IN_PROGRESS:
            assert assignment.report_text is None
        else:
            assert assignment.report_text is not None
            earned[assignment.ninja_id] += experience_for(m.reward)

        ninja = next(n for n in ninjas if n.id == assignment.ninja_id)
        assert m.accepted_by_ninja_name == ninja.username
        assert NINJA_RANKS.index(ninja.rank) >= MISSION_RANKS.index(m.rank_requirement)

    for n in ninjas:
        assert store.read_ninja(n.id).experience_points == earned[n.id]


@pytest.mark.parametrize("seed", [1, 7, 42, 2024])
def test_random_sequences_keep_invariants(engine, store, make_ninja, make_mission, seed):
    rng = random.Random(seed)
    ninjas = [make_ninja(f"ninja{i}", rank) for i, rank in enumerate(NinjaRank)]
    missions = [
        make_mission(rng.choice(list(MissionRank)), reward=rng.randint(1, 400))
        for _ in range(6)
    ]

    for step in range(60):
        op = rng.choice(["accept", "accept", "report", "abandon"])
        mission = rng.choice(missions)
        ninja = rng.choice(ninjas)
        try:
            if op == "accept":
                engine.accept_mission(mission.id, ninja)
            elif op == "report":
                engine.submit_report(mission.id, ninja, ReportIn(report_text=f"step {step}"))
            else:
                engine.abandon_mission(mission.id, ninja)
        except MissionError:
            pass
        check_invariants(store, missions, ninjas)
