import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


def database_url() -> str:
    return os.getenv("DATABASE_URL", "sqlite:///./mexicano.db")


def sql_echo() -> bool:
    return os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")


def parse_name_list(raw: str) -> List[str]:
    """Split a comma-separated name list, stripping whitespace and dropping empties."""
    return [x.strip() for x in (raw or "").split(",") if x.strip()]


def default_player_pool() -> List[str]:
    """Roster suggestions for new tournaments (MEXICANO_DEFAULT_PLAYER_POOL, comma-separated)."""
    return parse_name_list(os.getenv("MEXICANO_DEFAULT_PLAYER_POOL", ""))


def cors_origins() -> List[str]:
    origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    origins.extend(parse_name_list(os.getenv("CORS_ORIGINS", "")))
    return origins
