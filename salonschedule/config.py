"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.dates import parse_clock_time
from .domain.grid import GridWindow
from .domain.models import Actor, Role, TimeTemplate


class ApiConfig(BaseModel):
    """Salon back end connection settings."""
    base_url: str = "http://localhost:3000"
    timeout_seconds: float = 30
    email: str = ""

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        """Ensure the request timeout is positive."""
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value


class GridConfig(BaseModel):
    """Display window for the day/week timelines."""
    start_hour: int = 9
    end_hour: int = 23
    slot_height: float = 80
    padding: float = 8
    min_height: float = 40

    @field_validator("start_hour")
    @classmethod
    def validate_start_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @field_validator("end_hour")
    @classmethod
    def validate_end_hour(cls, v: int) -> int:
        """Validate hour is between 1 and 24."""
        if not 1 <= v <= 24:
            raise ValueError(f"Hour must be between 1 and 24, got {v}")
        return v

    @field_validator("slot_height")
    @classmethod
    def validate_slot_height(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("slot_height must be greater than zero")
        return value

    @field_validator("padding", "min_height")
    @classmethod
    def validate_non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("padding and min_height must not be negative")
        return value

    @model_validator(mode="after")
    def validate_hours_order(self) -> "GridConfig":
        """Ensure the configured window opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self

    def to_window(self) -> GridWindow:
        return GridWindow(
            start_hour=self.start_hour,
            end_hour=self.end_hour,
            slot_height=self.slot_height,
            padding=self.padding,
            min_height=self.min_height,
        )


class ScheduleConfig(BaseModel):
    """Schedule editing defaults."""
    time_step_minutes: int = 15
    default_break_reason: str = "Break"
    default_template_start: str = "10:00"
    default_template_end: str = "22:00"
    elevated_roles: List[Role] = Field(default_factory=lambda: [Role.OWNER, Role.ADMIN])

    @field_validator("time_step_minutes")
    @classmethod
    def validate_step(cls, value: int) -> int:
        """The step must split an hour evenly."""
        if value <= 0 or 60 % value != 0:
            raise ValueError(f"time_step_minutes must divide 60, got {value}")
        return value

    @field_validator("default_template_start", "default_template_end")
    @classmethod
    def validate_clock(cls, value: str) -> str:
        parse_clock_time(value)
        return value

    @model_validator(mode="after")
    def validate_template_order(self) -> "ScheduleConfig":
        if parse_clock_time(self.default_template_end) <= parse_clock_time(self.default_template_start):
            raise ValueError("default_template_end must be later than default_template_start")
        return self

    def default_template(self) -> TimeTemplate:
        return TimeTemplate(
            start_time=parse_clock_time(self.default_template_start),
            end_time=parse_clock_time(self.default_template_end),
        )


class IdentityConfig(BaseModel):
    """Who the CLI acts as when writing schedules."""
    user_id: str = "me"
    role: Role = Role.OWNER
    employee_id: Optional[str] = None

    @model_validator(mode="after")
    def validate_employee_link(self) -> "IdentityConfig":
        """Everybody except the owner is linked to an employee record."""
        if self.role != Role.OWNER and not self.employee_id:
            raise ValueError(f"employee_id is required for role '{self.role.value}'")
        return self

    def to_actor(self) -> Actor:
        return Actor(user_id=self.user_id, role=self.role, employee_id=self.employee_id)


class AppConfig(BaseModel):
    """Application configuration."""
    api: ApiConfig = Field(default_factory=ApiConfig)
    identity: IdentityConfig = Field(default_factory=IdentityConfig)
    grid: GridConfig = Field(default_factory=GridConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    mock_data_file: Optional[Path] = None

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

        config = cls(**data)

        if config.mock_data_file is not None and not config.mock_data_file.is_absolute():
            config.mock_data_file = config_path.parent / config.mock_data_file

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
