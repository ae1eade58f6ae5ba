# barberworld/config.py

import os
import warnings
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# SQLite database (file-based) unless told otherwise
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./barber.db")
DATABASE_ECHO = os.getenv("DATABASE_ECHO", "false").lower() == "true"

SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    warnings.warn("SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2)
    SECRET_KEY = "change-me-later"
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Client side
API_URL = os.getenv("API_URL", "https://barber-world-production.up.railway.app")
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))
REDIS_URL = os.getenv("REDIS_URL")

# Freshness windows for the client cache
APPOINTMENT_CACHE_TTL_SECONDS = int(os.getenv("APPOINTMENT_CACHE_TTL_SECONDS", "300"))
SLOT_SNAPSHOT_TTL_SECONDS = int(os.getenv("SLOT_SNAPSHOT_TTL_SECONDS", "120"))
