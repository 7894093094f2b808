"""Configuration management."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field
from rich.logging import RichHandler


# Load environment variables from .env file
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)


# Values shipped in .env.example; treated exactly like a missing key
GOOGLE_MAPS_KEY_PLACEHOLDER = "your_google_maps_api_key_here"
GEMINI_KEY_PLACEHOLDER = "your_gemini_api_key_here"
KEY_PLACEHOLDERS = frozenset({GOOGLE_MAPS_KEY_PLACEHOLDER, GEMINI_KEY_PLACEHOLDER})


def is_unset(value: str | None) -> bool:
    """True for empty keys and for the documented placeholder values."""
    return not value or not value.strip() or value.strip() in KEY_PLACEHOLDERS


class Settings(BaseModel):
    """Application settings."""

    # API keys (may be overridden by the credential store)
    google_maps_api_key: str | None = Field(
        default_factory=lambda: os.getenv("GOOGLE_MAPS_API_KEY")
    )
    gemini_api_key: str | None = Field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY")
    )

    # Generative model settings
    gemini_model: str = Field(
        default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-2.0-flash-exp")
    )
    gemini_base_url: str = Field(
        default_factory=lambda: os.getenv(
            "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        )
    )
    intent_temperature: float = 0.1
    intent_max_output_tokens: int = 200

    # Directions provider settings
    directions_url: str = Field(
        default_factory=lambda: os.getenv(
            "DIRECTIONS_URL", "https://maps.googleapis.com/maps/api/directions/json"
        )
    )
    directions_timeout_s: float = Field(
        default_factory=lambda: float(os.getenv("DIRECTIONS_TIMEOUT_S", "30"))
    )
    http_timeout_s: float = Field(
        default_factory=lambda: float(os.getenv("HTTP_TIMEOUT_S", "60"))
    )

    # Local state
    credentials_file: Path = Field(
        default_factory=lambda: Path(
            os.getenv("CREDENTIALS_FILE", Path.home() / ".navigator" / "credentials.json")
        ).expanduser()
    )
    credentials_ttl_days: int = 30
    log_level: str = Field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "WARNING")
    )

    def validate_required(self) -> list[str]:
        """Check for missing required configuration."""
        missing = []

        if is_unset(self.google_maps_api_key):
            missing.append("GOOGLE_MAPS_API_KEY")

        # Gemini is only needed for free-text requests

        return missing


def configure_logging(level: str | None = None) -> None:
    """Route all loggers through a rich handler."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


# Global settings instance
settings = Settings()
