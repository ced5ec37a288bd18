from datetime import date, time
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.scheduling.value_objects.scoring import ScoringWeights
from ..domain.scheduling.value_objects.timeline import TimelineConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BUILDSEQ_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    ENVIRONMENT: Literal["local", "staging", "production"] = "local"

    # Logging and monitoring
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"
    ENABLE_METRICS: bool = True

    # Timeline configuration
    HOURS_PER_DAY: float = Field(default=9.0, gt=0, le=24)
    SCHEDULE_START_DATE: date = Field(default_factory=date.today)
    SCHEDULE_START_TIME: time = time(6, 0)

    # Optimizer
    OPTIMIZER_ATTEMPT_BUDGET: int = Field(default=20, ge=1)
    OPTIMIZER_RANDOM_SEED: int | None = None
    OPTIMIZER_TIME_LIMIT_SECONDS: float | None = Field(default=None, gt=0)

    # Lane scoring weights
    WEIGHT_BALANCE: float = Field(default=100.0, ge=0)
    WEIGHT_LOAD: float = Field(default=1.0, ge=0)
    WEIGHT_CROSS_LANE_DEPENDENCY: float = Field(default=50.0, ge=0)
    WEIGHT_SAME_LANE_BONUS: float = Field(default=5.0, ge=0)
    WEIGHT_RESOURCE_OVERLAP: float = Field(default=200.0, ge=0)
    WEIGHT_MOVEMENT: float = Field(default=2.0, ge=0)

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid option."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    def timeline_config(self) -> TimelineConfig:
        return TimelineConfig(
            hours_per_day=self.HOURS_PER_DAY,
            start_date=self.SCHEDULE_START_DATE,
            start_time=self.SCHEDULE_START_TIME,
        )

    def scoring_weights(self) -> ScoringWeights:
        return ScoringWeights(
            balance=self.WEIGHT_BALANCE,
            load=self.WEIGHT_LOAD,
            cross_lane_dependency=self.WEIGHT_CROSS_LANE_DEPENDENCY,
            same_lane_bonus=self.WEIGHT_SAME_LANE_BONUS,
            resource_overlap=self.WEIGHT_RESOURCE_OVERLAP,
            movement=self.WEIGHT_MOVEMENT,
        )


settings = Settings()
