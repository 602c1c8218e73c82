import os

# --- Config / globals ---
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./checkin.db")
REDIS_URL = os.environ.get("REDIS_URL")  # idempotency cache is off when unset

RAPID_SCAN_WINDOW_MS = int(os.environ.get("RAPID_SCAN_WINDOW_MS", "3000"))
SCAN_MAX_ATTEMPTS = int(os.environ.get("SCAN_MAX_ATTEMPTS", "5"))
IDEMPOTENCY_TTL_SECONDS = int(os.environ.get("IDEMPOTENCY_TTL_SECONDS", "300"))

MIN_TEAM_MEMBERS = int(os.environ.get("MIN_TEAM_MEMBERS", "2"))
MAX_TEAM_MEMBERS = int(os.environ.get("MAX_TEAM_MEMBERS", "4"))
VALID_ROOMS = [r.strip() for r in os.environ.get("VALID_ROOMS", "D31,D32,D33,D34").split(",") if r.strip()]
VALID_SLOTS = [s.strip() for s in os.environ.get("VALID_SLOTS", "1,2").split(",") if s.strip()]

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
