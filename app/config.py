"""
Configuration settings for the Forsaj content API
"""
import os
import tempfile
from pathlib import Path
from typing import List
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

DEBUG = os.getenv('DEBUG', 'False') == 'True'

# Get mode (development or production)
MODE = os.getenv("MODE", "development")


def get_env_var(key: str, default: str = None) -> str:
    """Fetch an environment variable and raise an error if it's missing (unless default is provided)."""
    value = os.getenv(key, default)
    if value is None and default is None:
        raise ValueError(f"Missing environment variable: {key}")
    return value


# Database URL (local SQLite file when nothing is configured)
DEFAULT_DATABASE_URL = f"sqlite+aiosqlite:///{BASE_DIR / 'forsaj_content.db'}"

DATABASE_URL = get_env_var(
    "PRODUCTION_DB_URL" if MODE == "production" else "STAGING_DB_URL",
    DEFAULT_DATABASE_URL,
)

# SSL certificate for managed PostgreSQL (optional)
DB_SSL_CERT_CONTENT = os.getenv("DB_SSL_CERT", "")
DB_SSL_CERT_PATH = ""

if DB_SSL_CERT_CONTENT:
    DB_SSL_CERT_PATH = os.path.join(tempfile.gettempdir(), "db-ca.crt")
    # Write the certificate to a file at runtime
    with open(DB_SSL_CERT_PATH, "w") as f:
        f.write(DB_SSL_CERT_CONTENT)

# Content storage
WEB_DATA_DIR = Path(get_env_var("WEB_DATA_DIR", str(BASE_DIR / "data")))

# Row id / file name of the composite document holding every resource
CONTENT_STRUCT_ID = get_env_var("CONTENT_STRUCT_ID", "content-struct")

# Database (re)connection policy
DB_RECONNECT_COOLDOWN_SECONDS = float(get_env_var("DB_RECONNECT_COOLDOWN_SECONDS", "15"))
DB_INIT_RETRIES = int(get_env_var("DB_INIT_RETRIES", "10"))
DB_INIT_RETRY_DELAY_SECONDS = float(get_env_var("DB_INIT_RETRY_DELAY_SECONDS", "5"))

# CORS Configuration
# Include both localhost and 127.0.0.1 as browsers treat them as different origins
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in get_env_var(
        "CORS_ALLOWED_ORIGINS",
        "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173",
    ).split(",")
    if origin.strip()
]

CORS_ALLOW_CREDENTIALS = True

# Server
PORT = int(get_env_var("PORT", "5000"))
