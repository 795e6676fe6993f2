from abc import ABC, abstractmethod
from typing import Tuple

from healthgate.contracts.probe import Probe, RegisteredProbe
from healthgate.contracts.status import CheckKind


class Registry(ABC):
    """
    Abstract base class for probe registry implementations.
    """

    @abstractmethod
    def register(self, probe: Probe, migrated: bool = False) -> RegisteredProbe:
        """
        Register a probe.

        Args:
            probe (Probe): The probe to register.
            migrated (bool): Initial migration flag.

        Returns:
            RegisteredProbe: The stored entry.

        Raises:
            DuplicateNameError: If a probe with the same name and kind exists.
        """

    @abstractmethod
    def unregister(self, name: str, check_kind: CheckKind) -> bool:
        """
        Remove a probe.

        Returns:
            bool: True if a probe was removed, False if none matched.
        """

    @abstractmethod
    def probes_for(self, check_kind: CheckKind) -> Tuple[RegisteredProbe, ...]:
        """
        Return the probes registered for a kind, in registration order.

        Returns:
            Tuple[RegisteredProbe, ...]: Immutable snapshot of the entries.
        """

    @abstractmethod
    def set_migrated(self, name: str, check_kind: CheckKind, migrated: bool) -> bool:
        """
        Set a probe's migration flag.

        Returns:
            bool: The previous value of the flag.

        Raises:
            ProbeNotFoundError: If no such probe is registered.
        """

    @abstractmethod
    def is_migrated(self, name: str, check_kind: CheckKind) -> bool:
        """
        Return a probe's migration flag.

        Raises:
            ProbeNotFoundError: If no such probe is registered.
        """
