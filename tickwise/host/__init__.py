from tickwise.host.protocols import BudgetOracle, StateStore
from tickwise.host.stores import FileStateStore, MemoryStateStore

__all__ = ["BudgetOracle", "StateStore", "FileStateStore", "MemoryStateStore"]
