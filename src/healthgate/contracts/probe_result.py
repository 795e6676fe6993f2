from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from healthgate.contracts.status import CheckKind, Classification, Status


class ProbeOutcome(BaseModel):
    """
    What a probe's evaluate callable reports about its dependency.
    """

    model_config = ConfigDict(frozen=True)

    status: Status
    message: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def ok(cls, message: Optional[str] = None, **details) -> "ProbeOutcome":
        return cls(status=Status.OK, message=message, details=details)

    @classmethod
    def critical(cls, message: str, **details) -> "ProbeOutcome":
        return cls(status=Status.CRITICAL, message=message, details=details)


class ProbeResult(BaseModel):
    """
    Immutable record of one probe evaluation within one aggregation run.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    check_kind: CheckKind
    classification: Classification
    migrated: bool
    status: Status
    message: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    duration_seconds: float = 0.0

    @property
    def is_critical(self) -> bool:
        return self.status is Status.CRITICAL


class AggregateResult(BaseModel):
    """
    Combined outcome of every probe registered for one check kind.
    """

    model_config = ConfigDict(frozen=True)

    check_kind: CheckKind
    status: Status
    results: Tuple[ProbeResult, ...] = ()
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def critical_results(self) -> Tuple[ProbeResult, ...]:
        return tuple(r for r in self.results if r.is_critical)
