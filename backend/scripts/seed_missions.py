# backend/scripts/seed_missions.py
"""
Seed demo data into the configured store (MISSION_STORE / DATABASE_URL).

    python scripts/seed_missions.py

Safe to re-run: ninjas and missions that already exist are skipped.
"""
from ninja_missions.config import load_settings
from ninja_missions.identity import IdentityService
from ninja_missions.ranks import MissionRank
from ninja_missions.schemas import MissionQuery
from ninja_missions.store import SqlMissionStore, build_store

MISSIONS = [
    ("Rescue Tora the cat", "The Daimyo's wife lost her cat again.", MissionRank.D, 50),
    ("Weed the Hokage's garden", "Every last weed. Do not touch the tomatoes.", MissionRank.D, 30),
    ("Escort the bridge builder", "Guard Tazuna on the road to the Land of Waves.", MissionRank.C, 250),
    ("Recover the stolen scroll", "A forbidden scroll left the village last night.", MissionRank.B, 800),
    ("Infiltrate the hidden lab", "Gather intel on the abandoned research site.", MissionRank.A, 2500),
    ("Defend the village", "A threat on the scale of the Akatsuki.", MissionRank.S, 10000),
]

DEMO_NINJAS = [
    ("naruto", "ramen123", "Genin"),
    ("kakashi", "icha-icha", "Jonin"),
]


def main() -> None:
    settings = load_settings()
    store = build_store(settings)
    if isinstance(store, SqlMissionStore):
        store.create_all()

    identity = IdentityService(store, settings.jwt_secret, settings.jwt_expire_hours)
    for username, password, rank in DEMO_NINJAS:
        if store.find_credentials(username) is None:
            identity.register(username, password, rank)
            print(f"[seed] ninja {username} ({rank})")

    existing = store.list_missions(MissionQuery(page_size=1000)).data
    seeded = {m.title for m in existing}
    for title, description, rank, reward in MISSIONS:
        if title in seeded:
            continue
        m = store.add_mission(title, description, rank, reward)
        print(f"[seed] mission {m.id}: {title} [{rank.value}] reward={reward}")


if __name__ == "__main__":
    main()
