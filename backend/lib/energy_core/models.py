# backend/lib/energy_core/models.py
from dataclasses import dataclass, field
from typing import Optional, Union


@dataclass(frozen=True)
class UsageObservation:
    user_id: str
    date: str
    usage: float
    timestamp: str


@dataclass(frozen=True)
class ThresholdSetting:
    user_id: str
    threshold: Optional[float] = None

    @property
    def is_defined(self) -> bool:
        return self.threshold is not None


@dataclass(frozen=True)
class AlertEvent:
    user_id: str
    date: str
    usage: float
    threshold: float
    message: str

    @classmethod
    def for_observation(cls, observation: UsageObservation, threshold: float) -> "AlertEvent":
        message = (
            f"Energy usage alert: Your energy usage of {observation.usage} kWh "
            f"on {observation.date} exceeds your threshold of {threshold} kWh."
        )
        return cls(
            user_id=observation.user_id,
            date=observation.date,
            usage=observation.usage,
            threshold=threshold,
            message=message,
        )

    def to_dict(self) -> dict:
        return {
            'userId': self.user_id,
            'date': self.date,
            'usage': self.usage,
            'threshold': self.threshold,
            'message': self.message,
        }


@dataclass(frozen=True)
class CsvRow:
    line_number: int
    date: Optional[str] = None
    usage: Optional[str] = None
    timestamp: Optional[str] = None


@dataclass(frozen=True)
class SkippedRow:
    line_number: int
    reason: str


ParsedRow = Union[CsvRow, SkippedRow]


@dataclass(frozen=True)
class IngestionResult:
    observation: UsageObservation
    threshold: Optional[float]
    threshold_exceeded: bool
    status: str = "persisted"


@dataclass
class BatchResult:
    key: str
    user_id: str
    rows_processed: int = 0
    skipped: list = field(default_factory=list)

    @property
    def rows_skipped(self) -> int:
        return len(self.skipped)
