import os
from datetime import timedelta
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent  # project root (where wsgi.py is)
load_dotenv(BASE_DIR / ".env")


def _csv_env(name: str, default: str) -> tuple:
    raw = os.getenv(name, default)
    return tuple(p.strip() for p in raw.split(",") if p.strip())


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'dailypoll.db'}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "jwt-dev-secret")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(
        minutes=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES_MIN", "30"))
    )
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(
        days=int(os.getenv("JWT_REFRESH_TOKEN_EXPIRES_DAYS", "7"))
    )

    # IANA zone name used for "today" and the poll window; empty means server local time
    POLL_TIMEZONE = os.getenv("POLL_TIMEZONE") or None

    # Endpoints reachable cross-origin (login page bootstrap calls)
    CORS_PATHS = _csv_env("CORS_PATHS", "/api/auth/register-user,/api/auth/setup-admin")

    # Directory import
    MAX_IMPORT_ROWS = int(os.getenv("MAX_IMPORT_ROWS", "5000"))

    SWAGGER = {"title": "Daily Poll API", "uiversion": 3}
