"""LifetimeStats entity - singleton row holding cumulative spend."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field as PydanticField
from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from shotlab.models.settings import AIModel

LIFETIME_STATS_KEY = "lifetime"


def empty_model_counts() -> dict[str, int]:
    return {model.value: 0 for model in AIModel}


class LifetimeStats(SQLModel, table=True):
    """Cumulative generation statistics; only grows until an explicit reset."""

    __tablename__ = "lifetime_stats"  # type: ignore[assignment]

    key: str = Field(default=LIFETIME_STATS_KEY, primary_key=True, max_length=32)
    total_images_generated: int = Field(default=0, ge=0)
    total_input_tokens: int = Field(default=0, ge=0)
    total_output_tokens: int = Field(default=0, ge=0)
    total_cost: float = Field(default=0.0, ge=0)
    model_counts: dict = Field(default_factory=empty_model_counts, sa_column=Column(JSON))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class StatsIncrement(BaseModel):
    """Aggregate of one batch's successful jobs."""

    model: AIModel
    images_generated: int = PydanticField(default=0, ge=0)
    input_tokens: int = PydanticField(default=0, ge=0)
    output_tokens: int = PydanticField(default=0, ge=0)
    cost: float = PydanticField(default=0.0, ge=0)
