"""
Configuration management using Pydantic models loaded from YAML.
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.exceptions import InvalidConfiguration
from .domain.models import TimeOfDay

SUPABASE_KEY_ENV_VAR = "SUPABASE_SERVICE_ROLE_KEY"


def _validate_clock_time(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        return TimeOfDay.parse(value).format()
    except InvalidConfiguration as exc:
        raise ValueError(str(exc)) from exc


class ScheduleDefaults(BaseModel):
    """Fallback working hours used when the settings store has no value."""
    working_start: str = "08:00"
    working_end: str = "18:00"
    break_start: Optional[str] = "12:00"
    break_end: Optional[str] = "13:00"
    slot_step_minutes: int = 15
    min_advance_hours: int = 0
    max_advance_days: Optional[int] = None

    @field_validator("working_start", "working_end", "break_start", "break_end")
    @classmethod
    def validate_time(cls, value: Optional[str]) -> Optional[str]:
        """Normalise times to zero-padded HH:MM."""
        return _validate_clock_time(value)

    @field_validator("slot_step_minutes")
    @classmethod
    def validate_step(cls, value: int) -> int:
        """Ensure the slot grid step is positive."""
        if value <= 0:
            raise ValueError("slot_step_minutes must be greater than zero")
        return value

    @field_validator("min_advance_hours", "max_advance_days")
    @classmethod
    def validate_non_negative(cls, value: Optional[int]) -> Optional[int]:
        """Booking horizon limits cannot be negative."""
        if value is not None and value < 0:
            raise ValueError("booking horizon values must not be negative")
        return value

    @model_validator(mode="after")
    def validate_break_pair(self) -> "ScheduleDefaults":
        """A default break needs both ends or neither."""
        if (self.break_start is None) != (self.break_end is None):
            raise ValueError("break_start and break_end must both be set or both be null")
        return self


class SupabaseTables(BaseModel):
    """Table names of the hosted database."""
    settings: str = "Settings"
    lessons: str = "Lesson"
    bookings: str = "Booking"
    blocked_slots: str = "BlockedSlot"


class SupabaseConfig(BaseModel):
    """Connection settings for the Supabase REST endpoint."""
    url: str
    api_key: Optional[str] = None
    tables: SupabaseTables = Field(default_factory=SupabaseTables)
    timeout_seconds: int = 30

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        """Strip trailing slashes so paths can be appended."""
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"Supabase url must start with http:// or https://, got '{value}'")
        return value

    def resolve_api_key(self, stored_key: Optional[str] = None) -> Optional[str]:
        """
        Pick the API key from config, the keyring, or the environment, in that order.
        """
        return self.api_key or stored_key or os.environ.get(SUPABASE_KEY_ENV_VAR)


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Stockholm"
    schedule: ScheduleDefaults = Field(default_factory=ScheduleDefaults)
    data_file: Optional[Path] = None
    supabase: Optional[SupabaseConfig] = None

    @model_validator(mode="after")
    def validate_data_source(self) -> "AppConfig":
        """Exactly one data source must be configured."""
        if self.data_file is None and self.supabase is None:
            raise ValueError("Configure either 'data_file' or 'supabase' as data source.")
        if self.data_file is not None and self.supabase is not None:
            raise ValueError("'data_file' and 'supabase' cannot be used at the same time.")
        return self

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        A relative ``data_file`` is resolved against the config file's directory.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)

        if config.data_file is not None and not config.data_file.is_absolute():
            config.data_file = config_path.parent / config.data_file

        return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
