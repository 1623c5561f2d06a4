import os
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]
load_dotenv(ROOT_DIR / ".env")


class Settings:
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./habit_dashboard.db")
    AUTO_CREATE_SCHEMA: bool = os.getenv("AUTO_CREATE_SCHEMA", "0") == "1"
    TIME_ZONE: str = os.getenv("TIME_ZONE", "Asia/Kathmandu").strip() or "Asia/Kathmandu"
    ANALYTICS_WINDOW_DAYS: int = int(os.getenv("ANALYTICS_WINDOW_DAYS", "30"))
    ANALYTICS_FETCH_DAYS: int = int(os.getenv("ANALYTICS_FETCH_DAYS", "90"))
    LOCAL_STATE_PATH: str = os.getenv("LOCAL_STATE_PATH", str(ROOT_DIR / ".dashboard_state.json"))
    DASHBOARD_USER_ID: str = os.getenv("DASHBOARD_USER_ID", "").strip()
    TODAY_TICK_SECONDS: float = float(os.getenv("TODAY_TICK_SECONDS", "60"))
    CHALLENGE_TICK_SECONDS: float = float(os.getenv("CHALLENGE_TICK_SECONDS", "1"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    CORS_ORIGINS: list[str] = [
        item.strip()
        for item in os.getenv("CORS_ORIGINS", "*").split(",")
        if item.strip()
    ]


settings = Settings()
