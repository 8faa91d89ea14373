from src.line.config import InvalidConfiguration, LineConfig, load_config
from src.line.model import AssemblyPlan, Station, Task
from src.line.problem import Problem

__all__ = [
    "AssemblyPlan",
    "InvalidConfiguration",
    "LineConfig",
    "Problem",
    "Station",
    "Task",
    "load_config",
]
