import logging
import os
import sys
import uvicorn
import socket

# SET DATABASE_URL BEFORE loading settings!
# Without it the settings default to the PostgreSQL service from docker-compose
if not os.getenv("DATABASE_URL"):
    # Get the directory where the executable is running from
    if getattr(sys, 'frozen', False):
        # Running as compiled executable
        base_dir = os.path.dirname(sys.executable)
    else:
        # Running as script
        base_dir = os.path.dirname(os.path.abspath(__file__))

    db_path = os.path.join(base_dir, "ninja_missions.db")
    # SQLite URL format: sqlite:///absolute/path/to/file.db (3 slashes for absolute)
    os.environ["DATABASE_URL"] = f"sqlite:///{db_path}"
    print(f"[INFO] Using SQLite database at: {db_path}")

from ninja_missions.config import load_settings
from ninja_missions.main import build_app
from ninja_missions.store import SqlMissionStore, build_store


def find_free_port(start_port=8000, max_attempts=10):
    """Find a free port starting from start_port"""
    for port in range(start_port, start_port + max_attempts):
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                s.bind(('127.0.0.1', port))
                return port
        except OSError:
            continue
    raise RuntimeError(f"Could not find a free port in range {start_port}-{start_port + max_attempts}")


if __name__ == "__main__":
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    store = build_store(settings)
    if isinstance(store, SqlMissionStore) and settings.database_url.startswith("sqlite"):
        # local runs have no migration step
        store.create_all()
    fastapi_app = build_app(settings, store)

    # Try to use port 8000, but find another if it's in use
    try:
        port = find_free_port(8000)
        if port != 8000:
            print(f"[WARN] Port 8000 in use, using port {port} instead")
    except RuntimeError:
        print("[ERROR] No free ports available")
        sys.exit(1)

    uvicorn.run(fastapi_app, host="127.0.0.1", port=port, reload=False)
