import logging
import threading
from typing import Iterable, Tuple

from healthgate.abstractions.registry import Registry
from healthgate.contracts.probe import Probe, RegisteredProbe
from healthgate.contracts.status import CheckKind, Classification
from healthgate.core.errors import (
    DuplicateNameError,
    ProbeNotFoundError,
    RegistrySealedError,
)

logger = logging.getLogger(__name__)


class ProbeRegistry(Registry):
    """
    Ordered, in-process registry of probes and their migration flags.

    Writers serialize on a lock and publish a fresh tuple; readers just take the
    current tuple, so in-flight aggregations always see a consistent snapshot.
    """

    def __init__(self, probes: Iterable[Probe] = (), migrated: Iterable = ()):
        """
        Initialize the ProbeRegistry.

        Args:
            probes: Probes to register immediately, in order.
            migrated: Keys ``(name, check_kind)`` to register as migrated.
        """
        self._entries: Tuple[RegisteredProbe, ...] = ()
        self._lock = threading.Lock()
        self._sealed = False
        migrated = set(migrated)
        for probe in probes:
            self.register(probe, migrated=probe.key in migrated)
        logger.info(f"ProbeRegistry initialized with {len(self._entries)} probes")

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self):
        """
        Forbid further register/unregister calls. Migration flags stay writable.
        """
        self._sealed = True
        logger.info(f"ProbeRegistry sealed with {len(self._entries)} probes")

    def register(self, probe: Probe, migrated: bool = False) -> RegisteredProbe:
        with self._lock:
            if self._sealed:
                raise RegistrySealedError(
                    f"Cannot register '{probe.name}': registry is sealed"
                )
            if any(entry.probe.key == probe.key for entry in self._entries):
                raise DuplicateNameError(probe.name, probe.check_kind)
            entry = RegisteredProbe(probe=probe, migrated=migrated)
            self._entries = self._entries + (entry,)
        if (
            probe.check_kind is CheckKind.LIVENESS
            and probe.classification is Classification.DECISIVE
        ):
            logger.warning(
                f"Decisive probe '{probe.name}' registered as liveness; "
                "liveness never evaluates dependency probes"
            )
        logger.info(f"Registered probe: {probe!r} (migrated={migrated})")
        return entry

    def unregister(self, name: str, check_kind: CheckKind) -> bool:
        with self._lock:
            if self._sealed:
                raise RegistrySealedError(
                    f"Cannot unregister '{name}': registry is sealed"
                )
            remaining = tuple(
                e for e in self._entries if e.probe.key != (name, check_kind)
            )
            removed = len(remaining) != len(self._entries)
            self._entries = remaining
        if removed:
            logger.info(f"Unregistered {check_kind.value} probe '{name}'")
        else:
            logger.warning(f"Probe '{name}' ({check_kind.value}) not found in registry")
        return removed

    def probes_for(self, check_kind: CheckKind) -> Tuple[RegisteredProbe, ...]:
        entries = self._entries
        return tuple(e for e in entries if e.check_kind is check_kind)

    def all_probes(self) -> Tuple[RegisteredProbe, ...]:
        return self._entries

    def set_migrated(self, name: str, check_kind: CheckKind, migrated: bool) -> bool:
        with self._lock:
            for index, entry in enumerate(self._entries):
                if entry.probe.key == (name, check_kind):
                    previous = entry.migrated
                    updated = entry.model_copy(update={"migrated": migrated})
                    self._entries = (
                        self._entries[:index] + (updated,) + self._entries[index + 1 :]
                    )
                    return previous
        raise ProbeNotFoundError(name, check_kind)

    def is_migrated(self, name: str, check_kind: CheckKind) -> bool:
        for entry in self._entries:
            if entry.probe.key == (name, check_kind):
                return entry.migrated
        raise ProbeNotFoundError(name, check_kind)

    def __len__(self):
        return len(self._entries)
