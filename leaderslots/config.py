"""
Configuration management using Pydantic models loaded from YAML.
"""

import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .domain.exceptions import ConfigurationError
from .domain.preferences import SchedulingPreferences, TimeWindow

ACCESS_TOKEN_ENV_VAR = "LEADERSLOTS_ACCESS_TOKEN"


def _dedupe_weekdays(value: List[int], field_name: str) -> List[int]:
    invalid_days = [day for day in value if day not in range(7)]
    if invalid_days:
        raise ValueError(f"{field_name} must be between 0 and 6, got {invalid_days}")
    # Preserve order while removing duplicates
    seen: set[int] = set()
    deduped: List[int] = []
    for day in value:
        if day not in seen:
            deduped.append(day)
            seen.add(day)
    return deduped


class DefaultsConfig(BaseModel):
    """Default settings for search."""
    duration_minutes: int = 30
    buffer_minutes: int = 15
    working_hours: TimeWindow = Field(default_factory=TimeWindow)
    working_days: List[int] = Field(default_factory=lambda: list(range(7)))  # 0=Sunday
    preferred_days: Optional[List[int]] = None

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure appointment duration is positive."""
        if value <= 0:
            raise ValueError("duration_minutes must be greater than zero")
        return value

    @field_validator("buffer_minutes")
    @classmethod
    def validate_buffer(cls, value: int) -> int:
        if value < 0:
            raise ValueError("buffer_minutes must not be negative")
        return value

    @field_validator("working_days")
    @classmethod
    def validate_working_days(cls, value: List[int]) -> List[int]:
        return _dedupe_weekdays(value, "working_days")

    @field_validator("preferred_days")
    @classmethod
    def validate_preferred_days(cls, value: Optional[List[int]]) -> Optional[List[int]]:
        if value is None:
            return value
        return _dedupe_weekdays(value, "preferred_days")


class Leader(BaseModel):
    """Leader whose calendar can host appointments."""
    name: str  # Used as alias
    calendar_id: str
    email: str = ""
    role: str = ""
    is_active: bool = True


class GoogleConfig(BaseModel):
    """Google Calendar API settings."""
    access_token: str = ""
    base_url: str = "https://www.googleapis.com/calendar/v3"
    timeout_seconds: float = 30

    def resolve_access_token(self) -> str:
        """Return the configured token, falling back to the environment."""
        token = self.access_token or os.environ.get(ACCESS_TOKEN_ENV_VAR, "")
        if not token:
            raise ConfigurationError(
                f"No Google access token configured. Set google.access_token "
                f"or the {ACCESS_TOKEN_ENV_VAR} environment variable."
            )
        return token


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "UTC"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    leaders: List[Leader] = Field(default_factory=list)
    google: GoogleConfig = Field(default_factory=GoogleConfig)
    lookup_timeout_seconds: Optional[float] = None

    @field_validator("leaders")
    @classmethod
    def validate_leaders(cls, value: List[Leader]) -> List[Leader]:
        """Ensure leader aliases and calendar ids are unique."""
        seen_names: set[str] = set()
        seen_calendars: set[str] = set()
        for leader in value:
            name_key = leader.name.lower()
            if name_key in seen_names:
                raise ValueError(f"Duplicate leader name detected: {leader.name}")
            if leader.calendar_id in seen_calendars:
                raise ValueError(f"Duplicate calendar id detected: {leader.calendar_id}")
            seen_names.add(name_key)
            seen_calendars.add(leader.calendar_id)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            ConfigurationError: If the file is missing or its content is invalid
        """
        if not config_path.exists():
            raise ConfigurationError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigurationError("Config file must contain a mapping at the root level.")

        try:
            return cls(**data)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration in {config_path}:\n{exc}") from exc

    def find_leader_by_name(self, name: str) -> Leader | None:
        """Find a leader by their name (alias)."""
        for leader in self.leaders:
            if leader.name.lower() == name.lower():
                return leader
        return None

    def find_leader_by_calendar_id(self, calendar_id: str) -> Leader | None:
        for leader in self.leaders:
            if leader.calendar_id.lower() == calendar_id.lower():
                return leader
        return None

    def resolve_leader(self, identifier: str) -> Leader:
        """
        Resolve a leader identifier (name/alias or calendar id) to a leader.

        Raises:
            ConfigurationError: If the leader is unknown or inactive
        """
        leader = self.find_leader_by_name(identifier) or self.find_leader_by_calendar_id(identifier)

        if leader is None:
            raise ConfigurationError(
                f"Unknown leader identifier: '{identifier}'. "
                f"Use a configured name or calendar id."
            )
        if not leader.is_active:
            raise ConfigurationError(f"Leader '{leader.name}' is inactive.")

        return leader

    def build_preferences(self, preferred_days: Optional[List[int]] = None) -> SchedulingPreferences:
        """Turn the configured defaults into request preferences."""
        days = preferred_days if preferred_days is not None else self.defaults.preferred_days
        try:
            return SchedulingPreferences(
                working_hours=self.defaults.working_hours,
                working_days=frozenset(self.defaults.working_days),
                buffer_minutes=self.defaults.buffer_minutes,
                timezone=self.timezone,
                preferred_days=frozenset(days) if days is not None else None,
            )
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid scheduling preferences: {exc}") from exc


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of leaderslots/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
