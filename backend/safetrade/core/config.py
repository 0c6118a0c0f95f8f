"""
Settings for the SafeTrade agreement service and wizard clients.

WHAT: Every tunable (database, catalog, slots, collaborator client, SSE, logging)
WHY: The same wizard code runs against a local service in tests and a deployed one in prod
HOW: pydantic-settings reads environment variables and an optional .env file
"""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

_BACKEND_DIR = Path(__file__).resolve().parent.parent.parent


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Environment-backed settings; list values are stored comma-separated."""

    APP_NAME: str = "SafeTrade Meeting Agreements"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Agreement store
    DATABASE_URL: str = "sqlite:///./data/safetrade.db"
    SEED_SAFE_ZONES_ON_STARTUP: bool = False  # insert the demo Newark-area catalog if missing

    # Masking falls back to this state when a listing has none
    DEFAULT_STATE: str = "NJ"

    # Meeting slots offered by the location step, in display order
    MEETING_TIME_SLOTS: str = "10:00 AM,11:00 AM,12:00 PM,1:00 PM,2:00 PM,3:00 PM,4:00 PM,5:00 PM"

    # Wizard side: where DealAgreementClient / SafeZoneCatalogClient point
    COLLABORATOR_BASE_URL: str = "http://localhost:8000/api/v1"
    COLLABORATOR_TIMEOUT: float = 10.0  # seconds
    AGREEMENT_POLL_INTERVAL: float = 3.0  # seconds between counterpart checks

    # Browser hosts allowed to call the service
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "./data/logs/safetrade.log"  # empty string disables the file handler

    # Agreement SSE stream
    SSE_HEARTBEAT_INTERVAL: int = 15  # idle seconds before a heartbeat
    SSE_POLL_INTERVAL: float = 1.0  # seconds between agreement reads

    @field_validator("CORS_ORIGINS", "MEETING_TIME_SLOTS", mode="before")
    @classmethod
    def join_list_values(cls, v):
        """Allow JSON lists in the environment as well as comma-separated strings."""
        return ",".join(v) if isinstance(v, list) else v

    def get_cors_origins_list(self) -> list[str]:
        return _split_csv(self.CORS_ORIGINS)

    def get_meeting_time_slots(self) -> list[str]:
        return _split_csv(self.MEETING_TIME_SLOTS)

    class Config:
        env_file = [str(_BACKEND_DIR.parent / ".env"), str(_BACKEND_DIR / ".env")]
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()
