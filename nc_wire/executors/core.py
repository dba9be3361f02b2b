"""
Core executor (prototype)
"""

import abc
import subprocess
from typing import Any

from pydantic import BaseModel, ConfigDict


class CommandResult(BaseModel):
    """
    The result of a synchronous command.
    """

    args: list[str]
    "The command that was run."
    returncode: int
    "Exit code of the command (127 if it could not be found)."
    stdout: str = ""
    "Captured standard output (with standard error, if merged)."

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class BackgroundProcess(BaseModel):
    """
    Handle on a command launched with CoreExecutor.launch. The executor
    that launched it is the only one that knows how to cancel it.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    args: list[str]
    "The command that was launched."
    process: Any
    "The local process object (subprocess.Popen or anything with the same interface)."
    pid: int | None = None
    "PID of the command on the host it runs on, if it reported one."

    def poll(self) -> int | None:
        return self.process.poll()

    def wait(self, timeout: float | None = None) -> int:
        """
        Wait for the command to exit and return its exit code.

        Raises
        ------
        subprocess.TimeoutExpired
            If the command has not exited within timeout seconds.
        """
        return self.process.wait(timeout=timeout)

    @property
    def running(self) -> bool:
        return self.poll() is None


class CoreExecutor(BaseModel, abc.ABC):
    """
    The core executor. This is the base class for all the ways we
    run commands, locally or on the remote host. Commands are always
    argv lists; executors that go through a shell quote them.
    """

    @abc.abstractmethod
    def run(self, args: list[str], merge_stderr: bool = False) -> CommandResult:
        """
        Run a command and wait for it to finish. Never raises on a
        non-zero exit code.

        Parameters
        ----------
        args : list[str]
            The command to run.
        merge_stderr : bool
            Whether to capture standard error together with standard output.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def launch(self, args: list[str], output: str) -> BackgroundProcess:
        """
        Start a command without waiting for it, with its standard output
        written to the file ``output`` on the executing host.

        Parameters
        ----------
        args : list[str]
            The command to launch.
        output : str
            Path, on the executing host, that receives standard output.
            Overwritten if it exists.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def pipeline(self, stages: list[list[str]]) -> int:
        """
        Run ``stages[0] | stages[1] | ...`` and wait for all of them.
        Standard error of every stage is left attached to the terminal.

        Returns
        -------
        int
            The exit code of the last stage that failed, or 0 if all stages
            succeeded.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def cancel(self, handle: BackgroundProcess):
        """
        Stop a command started with launch() on this executor. Safe to call
        on a command that has already exited.
        """
        raise NotImplementedError

    @staticmethod
    def _stop_local(process, grace: float = 5.0):
        """
        Terminate a local process, escalating to kill if it does not exit.
        """

        if process.poll() is not None:
            return

        process.terminate()

        try:
            process.wait(timeout=grace)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
