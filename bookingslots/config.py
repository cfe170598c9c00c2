"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.models import MAX_APPOINTMENT_DURATION, MIN_APPOINTMENT_DURATION


class DefaultsConfig(BaseModel):
    """Default settings for availability queries."""
    appointment_duration_minutes: int = 30
    booking_window_days: int = 30
    deduplicate_slots: bool = False

    @field_validator("appointment_duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure the duration is within the accepted profile range."""
        if not MIN_APPOINTMENT_DURATION <= value <= MAX_APPOINTMENT_DURATION:
            raise ValueError(
                f"appointment_duration_minutes must be between {MIN_APPOINTMENT_DURATION} "
                f"and {MAX_APPOINTMENT_DURATION}, got {value}"
            )
        return value

    @field_validator("booking_window_days")
    @classmethod
    def validate_window(cls, value: int) -> int:
        """Ensure the booking window covers at least one day."""
        if value < 1:
            raise ValueError("booking_window_days must be at least 1")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "America/Argentina/Buenos_Aires"
    data_file: Path = Path("data.yaml")
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    def resolve_data_file(self, config_path: Path | None = None) -> Path:
        """
        Resolve the data file location.

        Relative paths are taken relative to the config file's directory.
        """
        if self.data_file.is_absolute() or config_path is None:
            return self.data_file
        return Path(config_path).parent / self.data_file

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

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

        return cls(**data)


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
