from typing import List, Optional

from pydantic import BaseModel

from healthgate.contracts.probe_result import AggregateResult, ProbeResult
from healthgate.contracts.status import CheckKind, Classification, Status


class CheckEntry(BaseModel):
    """
    One probe's line in the readiness body.
    """

    name: str
    status: Status
    message: Optional[str] = None
    migrated: bool

    @classmethod
    def from_result(cls, result: ProbeResult) -> "CheckEntry":
        return cls(
            name=result.name,
            status=result.status,
            message=result.message,
            migrated=result.migrated,
        )


class ReadinessResponse(BaseModel):
    """
    Readiness body. Lists every probe regardless of whether it affected the status.
    """

    status: Status
    checks: List[CheckEntry] = []

    @classmethod
    def from_aggregate(cls, aggregate: AggregateResult) -> "ReadinessResponse":
        return cls(
            status=aggregate.status,
            checks=[CheckEntry.from_result(r) for r in aggregate.results],
        )


class LivenessResponse(BaseModel):
    status: Status = Status.OK


class MigrationUpdate(BaseModel):
    migrated: bool


class MigrationEntry(BaseModel):
    """
    Operator view of one registered probe and how it currently counts.
    """

    name: str
    check_kind: CheckKind
    classification: Classification
    migrated: bool
    decisive: bool


class MigrationStatus(BaseModel):
    migration_mode: bool
    probes: List[MigrationEntry] = []
