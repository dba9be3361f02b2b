"""
Command executors; the only way nc_wire touches either host.
"""

from .core import BackgroundProcess, CommandResult, CoreExecutor
from .local import LocalExecutor
from .ssh import SSHExecutor

Executors: dict[int, CoreExecutor] = {
    0: CoreExecutor,
    1: LocalExecutor,
    2: SSHExecutor,
}

ExecutorNames: dict[str, int] = {
    "core": 0,
    "local": 1,
    "ssh": 2,
}


def executor_from_name(name: str) -> CoreExecutor:
    """
    Get an executor class from its name.
    """
    return Executors[ExecutorNames[name]]
