import logging
import os

# ----------------------------------------------------------------------------
# Auth
# ----------------------------------------------------------------------------
SECRET_KEY = os.getenv("SECRET_KEY", "super-secret-key-change-me")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7))  # 7 days

# ----------------------------------------------------------------------------
# Database
# ----------------------------------------------------------------------------
# Prefer PostgreSQL if provided, otherwise fall back to SQLite (so server always boots)
_env_db = os.getenv("DATABASE_URL", "").strip()
if _env_db:
    DATABASE_URL = _env_db
else:
    DATABASE_URL = "sqlite+aiosqlite:///./app.db"

# ----------------------------------------------------------------------------
# Avatars
# ----------------------------------------------------------------------------
AVATAR_DIR = os.getenv("AVATAR_DIR", "./avatars")
AVATAR_MAX_BYTES = int(os.getenv("AVATAR_MAX_BYTES", 10 * 1024 * 1024))
AVATAR_COMPRESS_BYTES = int(os.getenv("AVATAR_COMPRESS_BYTES", 2 * 1024 * 1024))

# ----------------------------------------------------------------------------
# Server
# ----------------------------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
PORT = int(os.getenv("PORT", 8000))


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
