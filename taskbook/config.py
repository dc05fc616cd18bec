from pathlib import Path
import os

from dotenv import load_dotenv

# Load environment variables from repo root and taskbook/.env (if present).
REPO_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(REPO_ROOT / ".env")
load_dotenv(Path(__file__).resolve().parent / ".env")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./taskbook.db")
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

_cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:4200,http://localhost:3000")
CORS_ORIGINS = [origin.strip() for origin in _cors_origins.split(",") if origin.strip()]

# Checked by the gateway before the identity provider is ever called.
MIN_PASSWORD_LENGTH = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))
# Enforced by the identity provider itself; may be stricter than the gateway.
PROVIDER_MIN_PASSWORD_LENGTH = int(os.getenv("PROVIDER_MIN_PASSWORD_LENGTH", "6"))

MIN_TASK_YEAR = int(os.getenv("MIN_TASK_YEAR", "2000"))
MAX_TASK_YEAR = int(os.getenv("MAX_TASK_YEAR", "2100"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
