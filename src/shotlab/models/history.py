"""HistoryEntry entity - one generated (or uploaded) artifact with lifecycle tracking."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel
from sqlalchemy import JSON, Column, Text
from sqlmodel import Field, SQLModel


def _now() -> datetime:
    return datetime.now(timezone.utc)


class HistoryStatus(str, Enum):
    """History entry lifecycle status."""

    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = (HistoryStatus.COMPLETED, HistoryStatus.FAILED)


class InvalidStateTransition(Exception):
    """Raised when attempting an invalid history entry state transition."""

    pass


class CostData(BaseModel):
    """Estimated vs. actual spend for one entry."""

    estimated_input_tokens: int = 0
    estimated_output_tokens: int = 0
    estimated_cost: float = 0.0
    actual_input_tokens: int = 0
    actual_output_tokens: int = 0
    actual_cost: float = 0.0
    variance_percent: float = 0.0


class HistoryEntry(SQLModel, table=True):
    """HistoryEntry is a generated variant (or an uploaded source image)."""

    __tablename__ = "history_entries"  # type: ignore[assignment]

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True, max_length=64)
    batch_id: Optional[str] = Field(default=None, index=True, max_length=64)
    original_url: str = Field(sa_column=Column(Text, nullable=False))
    processed_url: Optional[str] = Field(default=None, sa_column=Column(Text))
    timestamp: datetime = Field(default_factory=_now, index=True)
    status: HistoryStatus = Field(default=HistoryStatus.IDLE, index=True)
    is_video: bool = Field(default=False)
    settings_used: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    error: Optional[str] = Field(default=None, max_length=1000)
    seed: Optional[int] = Field(default=None)
    cost_data: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    @property
    def cost(self) -> CostData:
        return CostData.model_validate(self.cost_data or {})

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def mark_completed(self, processed_url: str, cost: CostData, seed: Optional[int] = None) -> None:
        """Transition from processing to completed.

        Args:
            processed_url: Final artifact reference (data URL)
            cost: Estimated and actual cost for this entry
            seed: Batch seed used for the request, if any

        Raises:
            InvalidStateTransition: If current status is not processing
            ValueError: If processed_url is empty
        """
        if self.status != HistoryStatus.PROCESSING:
            raise InvalidStateTransition(
                f"Cannot mark completed from {self.status.value}. "
                "Entry must be in processing state."
            )
        if not processed_url:
            raise ValueError("processed_url is required")
        self.processed_url = processed_url
        self.cost_data = cost.model_dump()
        self.seed = seed
        self.error = None
        self.status = HistoryStatus.COMPLETED

    def mark_failed(self, error_message: str) -> None:
        """Transition from processing to failed.

        Args:
            error_message: Failure reason (truncated to 1000 characters)

        Raises:
            InvalidStateTransition: If current status is not processing
        """
        if self.status != HistoryStatus.PROCESSING:
            raise InvalidStateTransition(
                f"Cannot mark failed from {self.status.value}. Entry must be in processing state."
            )
        self.error = (error_message or "Unknown error")[:1000]
        self.status = HistoryStatus.FAILED
