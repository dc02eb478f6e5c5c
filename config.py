"""
Configuration module for the Court Scheduler.
Loads environment variables and provides typed configuration.
"""

from datetime import time
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

from models.pricing import RateSchedule

# Load .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Facility
    facility_name: str = "Rebsamen Tennis Center"
    day_start: time = time(8, 30)
    day_end: time = time(21, 0)
    slot_minutes: int = 30
    total_courts: int = 17

    # Rates (USD)
    rate_prime: float = 12.00
    rate_non_prime: float = 10.00
    rate_group_50: float = 4.00  # 50+ court hours
    rate_group_10: float = 4.50  # 10+ court hours
    rate_team_5: float = 50.00  # Team tennis, 5 courts
    rate_team_3: float = 30.00  # Team tennis, 3 courts
    rate_ball_machine: float = 10.00

    # Cancellation policy
    refund_window_hours: float = 24
    no_show_grace_minutes: int = 15

    # Data source (published spreadsheet tabs + Apps Script endpoint)
    bookings_csv_url: Optional[str] = None
    courts_csv_url: Optional[str] = None
    closures_csv_url: Optional[str] = None  # Optional tab
    apps_script_url: Optional[str] = (
        None  # Writes are simulated when unset
    )
    http_timeout_seconds: float = 30.0
    cache_ttl_seconds: int = 60
    refresh_interval_seconds: int = 60

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_file: Optional[str] = None

    environment: str = "development"  # development, staging, production

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def rate_schedule(self) -> RateSchedule:
        """Build the pricing configuration handed to the pricing engine."""
        return RateSchedule(
            prime=self.rate_prime,
            non_prime=self.rate_non_prime,
            group_50=self.rate_group_50,
            group_10=self.rate_group_10,
            team_5=self.rate_team_5,
            team_3=self.rate_team_3,
            ball_machine=self.rate_ball_machine,
        )

    def validate_data_source(self) -> None:
        """
        Validate that the spreadsheet endpoints are configured.

        Raises:
            ValueError: If required fields are missing or invalid
        """
        required_fields = ["bookings_csv_url", "courts_csv_url"]

        missing = []
        for field in required_fields:
            value = getattr(self, field, None)

            if not value:
                missing.append(field)
                continue

            # Placeholder values copied from .env.example
            value_str = str(value).lower()
            if value_str.startswith("your_") or "placeholder" in value_str:
                missing.append(field)
                continue

            if not value_str.startswith(("http://", "https://")):
                missing.append(field)

        if missing:
            raise ValueError(
                f"Missing or invalid data source configuration: "
                f"{', '.join(missing)}. "
                f"Please check your .env file."
            )


# Global settings instance
settings = Settings()
