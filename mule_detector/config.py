import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, model_validator

# Project root is one level up from mule_detector/
PROJECT_ROOT = Path(__file__).resolve().parent.parent

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
SAMPLE_PATH = Path(os.getenv("MULE_SAMPLE_PATH", str(PROJECT_ROOT / "data" / "sample_transactions.csv")))


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class DetectionConfig(BaseModel):
    """Thresholds and windows for every detector."""

    # Circular fund routing
    cycle_min_length: int = Field(3, ge=3)
    cycle_max_length: int = Field(5, ge=3)

    # Smurfing (fan-in / fan-out)
    fan_threshold: int = Field(10, ge=1)
    fan_window_hours: float = Field(72, gt=0)

    # Layered shell chains
    shell_threshold: int = Field(3, ge=0)
    min_chain_length: int = Field(3, ge=3)
    max_chain_length: int = Field(8, ge=3)
    require_shell_endpoint: bool = False

    # Velocity
    velocity_threshold: int = Field(5, ge=1)
    velocity_window_hours: float = Field(1, gt=0)

    # Optional guard on input size; None disables it
    max_transactions: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def _check_length_bounds(self) -> "DetectionConfig":
        if self.cycle_min_length > self.cycle_max_length:
            raise ValueError(
                f"cycle_min_length ({self.cycle_min_length}) exceeds cycle_max_length ({self.cycle_max_length})"
            )
        if self.min_chain_length > self.max_chain_length:
            raise ValueError(
                f"min_chain_length ({self.min_chain_length}) exceeds max_chain_length ({self.max_chain_length})"
            )
        return self

    @classmethod
    def from_env(cls) -> "DetectionConfig":
        defaults = cls()
        return cls(
            cycle_min_length=_env_int("MULE_CYCLE_MIN_LENGTH", defaults.cycle_min_length),
            cycle_max_length=_env_int("MULE_CYCLE_MAX_LENGTH", defaults.cycle_max_length),
            fan_threshold=_env_int("MULE_FAN_THRESHOLD", defaults.fan_threshold),
            fan_window_hours=_env_float("MULE_FAN_WINDOW_HOURS", defaults.fan_window_hours),
            shell_threshold=_env_int("MULE_SHELL_THRESHOLD", defaults.shell_threshold),
            min_chain_length=_env_int("MULE_MIN_CHAIN_LENGTH", defaults.min_chain_length),
            max_chain_length=_env_int("MULE_MAX_CHAIN_LENGTH", defaults.max_chain_length),
            require_shell_endpoint=_env_bool("MULE_REQUIRE_SHELL_ENDPOINT", defaults.require_shell_endpoint),
            velocity_threshold=_env_int("MULE_VELOCITY_THRESHOLD", defaults.velocity_threshold),
            velocity_window_hours=_env_float("MULE_VELOCITY_WINDOW_HOURS", defaults.velocity_window_hours),
            max_transactions=_env_int("MULE_MAX_TRANSACTIONS", defaults.max_transactions),
        )
