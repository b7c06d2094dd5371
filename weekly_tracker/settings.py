import os
from typing import TypedDict

from dotenv import load_dotenv


class AppConfig(TypedDict):
    """Configuration for the application"""

    SPREADSHEET_ID: str
    GOOGLE_CREDENTIALS: str
    STATS_SHEET_NAME: str
    OWNER_EMAIL: str | None
    EDITOR_EMAILS: list[str]
    COOLDOWN_SECONDS: float


def load_config() -> AppConfig:
    """Load configuration from environment variables"""
    load_dotenv()

    required_vars = {
        "SPREADSHEET_ID": os.getenv("SPREADSHEET_ID"),
        "GOOGLE_CREDENTIALS": os.getenv("GOOGLE_CREDENTIALS"),
    }

    missing = [k for k, v in required_vars.items() if not v]
    if missing:
        raise OSError(f"Missing required environment variables: {', '.join(missing)}")

    editors = os.getenv("EDITOR_EMAILS", "")
    return {
        **required_vars,
        "STATS_SHEET_NAME": os.getenv("STATS_SHEET_NAME", "Stats"),
        "OWNER_EMAIL": os.getenv("OWNER_EMAIL") or None,
        "EDITOR_EMAILS": [email.strip() for email in editors.split(",") if email.strip()],
        "COOLDOWN_SECONDS": float(os.getenv("COOLDOWN_SECONDS", "5")),
    }
