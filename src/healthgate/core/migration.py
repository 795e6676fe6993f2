import logging
from typing import List, Set, Tuple

from healthgate.abstractions.registry import Registry
from healthgate.contracts.health_response import MigrationEntry, MigrationStatus
from healthgate.contracts.probe import RegisteredProbe
from healthgate.contracts.status import CheckKind, Classification

logger = logging.getLogger(__name__)


def parse_migrated_probes(value: str) -> Set[Tuple[str, CheckKind]]:
    """
    Parse a MIGRATED_PROBES setting into registry keys.

    Entries are comma separated, either ``name`` (readiness) or ``kind:name``.

    Raises:
        ValueError: If an entry names an unknown check kind.
    """
    keys = set()
    for raw in value.split(","):
        item = raw.strip()
        if not item:
            continue
        if ":" in item:
            kind, name = item.split(":", 1)
            keys.add((name.strip(), CheckKind(kind.strip().lower())))
        else:
            keys.add((item, CheckKind.READINESS))
    return keys


class MigrationSwitch:
    """
    Process-wide control over how DECISIVE probes count during a staged rollout.

    While migration mode is enabled, a DECISIVE probe only fails readiness once
    its migrated flag is set; until then it is reported like an INFORMATIONAL
    one. With migration mode disabled every DECISIVE probe counts. The mode and
    the flags are read at every aggregation.
    """

    def __init__(self, registry: Registry, enabled: bool = True):
        self.registry = registry
        self._enabled = enabled
        logger.info(f"MigrationSwitch initialized with migration_mode={enabled}")

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self):
        if not self._enabled:
            logger.info("Migration mode enabled: unmigrated decisive probes are informational")
        self._enabled = True

    def complete_migration(self):
        if self._enabled:
            logger.info("Migration mode disabled: every decisive probe now affects readiness")
        self._enabled = False

    def set_migrated(self, name: str, check_kind: CheckKind, migrated: bool) -> bool:
        """
        Flip one probe's migration flag and record the change.

        Returns:
            bool: The previous value of the flag.

        Raises:
            ProbeNotFoundError: If no such probe is registered.
        """
        previous = self.registry.set_migrated(name, check_kind, migrated)
        if previous != migrated:
            logger.info(
                f"Migration flag for {check_kind.value} probe '{name}' "
                f"changed: {previous} -> {migrated}"
            )
        else:
            logger.debug(
                f"Migration flag for {check_kind.value} probe '{name}' already {migrated}"
            )
        return previous

    def is_decisive(self, entry: RegisteredProbe) -> bool:
        if entry.classification is not Classification.DECISIVE:
            return False
        return entry.migrated or not self._enabled

    def status(self) -> MigrationStatus:
        probes: List[MigrationEntry] = []
        for kind in CheckKind:
            for entry in self.registry.probes_for(kind):
                probes.append(
                    MigrationEntry(
                        name=entry.name,
                        check_kind=entry.check_kind,
                        classification=entry.classification,
                        migrated=entry.migrated,
                        decisive=self.is_decisive(entry),
                    )
                )
        return MigrationStatus(migration_mode=self._enabled, probes=probes)
