from enum import Enum


class Status(str, Enum):
    """
    Outcome of a probe or of a whole aggregation. Deliberately two-valued.
    """

    OK = "ok"
    CRITICAL = "critical"

    @classmethod
    def from_bool(cls, healthy: bool) -> "Status":
        return cls.OK if healthy else cls.CRITICAL


class Classification(str, Enum):
    """
    Whether a probe's CRITICAL result may flip readiness.
    """

    DECISIVE = "decisive"
    INFORMATIONAL = "informational"


class CheckKind(str, Enum):
    READINESS = "readiness"
    LIVENESS = "liveness"
