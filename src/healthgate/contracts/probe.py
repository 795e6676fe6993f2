from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from healthgate.contracts.status import CheckKind, Classification


class Probe(BaseModel):
    """
    Capability record for a single named check.

    ``evaluate`` is a zero-argument callable, sync or async, returning a
    ProbeOutcome, a Status or a bool (True meaning healthy).
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    evaluate: Callable[[], Any]
    classification: Classification = Classification.DECISIVE
    check_kind: CheckKind = CheckKind.READINESS
    # Overrides Config.PROBE_TIMEOUT_SECONDS for this probe only
    timeout: Optional[float] = Field(default=None, gt=0)

    @property
    def key(self):
        return (self.name, self.check_kind)

    def __repr__(self):
        return (
            f"Probe(name={self.name}, classification={self.classification.value}, "
            f"check_kind={self.check_kind.value})"
        )


class RegisteredProbe(BaseModel):
    """
    A probe as held by the registry, together with its migration flag.
    """

    model_config = ConfigDict(frozen=True)

    probe: Probe
    migrated: bool = False

    @property
    def name(self) -> str:
        return self.probe.name

    @property
    def check_kind(self) -> CheckKind:
        return self.probe.check_kind

    @property
    def classification(self) -> Classification:
        return self.probe.classification
