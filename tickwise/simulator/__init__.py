from tickwise.simulator.host import SimulatedHost
from tickwise.simulator.generator import ScenarioGenerator, WorkloadSpec
from tickwise.simulator.engine import TickSimulation

__all__ = ["SimulatedHost", "ScenarioGenerator", "WorkloadSpec", "TickSimulation"]
