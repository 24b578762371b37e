"""Host collaborator interfaces the kernel consumes."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class BudgetOracle(Protocol):
    """Host-reported compute budget. Values may change between calls; never cache them."""

    def used(self) -> float:
        """Budget consumed so far this tick."""
        ...

    def tick_limit(self) -> float:
        """Hard ceiling for this tick."""
        ...

    def limit(self) -> float:
        """Sustained per-tick rate the host allows."""
        ...

    def bucket(self) -> float:
        """Banked unused budget from earlier ticks."""
        ...


@runtime_checkable
class StateStore(Protocol):
    """Whole-state blob storage, written once per tick."""

    def load(self) -> bytes:
        """Last saved blob, or empty bytes if nothing was saved."""
        ...

    def save(self, data: bytes) -> None:
        ...
