from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")


def _env_path(name: str) -> Path | None:
    value = os.getenv(name, "").strip()
    return Path(value) if value else None


def _env_tuple(name: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    session_secret: str = os.getenv("SESSION_SECRET", "sakany-secret-change-in-production")
    admin_email_domain: str = os.getenv("ADMIN_EMAIL_DOMAIN", "sakany.com")
    featured_limit: int = int(os.getenv("FEATURED_LIMIT", "6"))
    recent_limit: int = int(os.getenv("RECENT_LIMIT", "3"))
    default_page_size: int = 20
    seed_path: Path | None = _env_path("SAKANY_SEED_PATH")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


@dataclass(frozen=True)
class MatchingConfig:
    """
    Knobs for the lifestyle quiz.

    ``location_order`` decides both which archetype wins a tie and which one
    is reported when every location score is zero.
    """

    location_order: tuple[str, ...] = field(
        default_factory=lambda: _env_tuple(
            "LIFESTYLE_LOCATION_ORDER", "urban,suburban,rural"
        )
    )
    max_priorities: int = 3


DEFAULT_SETTINGS = Settings()
DEFAULT_MATCHING_CONFIG = MatchingConfig()
