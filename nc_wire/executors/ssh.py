"""
Executor that runs commands on a remote host over ssh. Authentication
is entirely ssh's business (keys, agents, ssh_config aliases).
"""

import shlex
import subprocess

from loguru import logger

from .core import BackgroundProcess, CommandResult, CoreExecutor

SSH_FAILURE = 255


class SSHExecutor(CoreExecutor):
    target: str
    "Anything ssh accepts as a destination (user@host, a config alias, ...)."
    ssh: str = "ssh"
    "The ssh binary."
    options: list[str] = []
    "Extra options passed to ssh before the target."

    def _ssh_args(self, command: str) -> list[str]:
        return [self.ssh, *self.options, self.target, command]

    def run(self, args: list[str], merge_stderr: bool = False) -> CommandResult:
        command = shlex.join(args)

        if merge_stderr:
            # Merge on the remote side so we see the remote command's
            # stderr, not ssh's.
            command += " 2>&1"

        logger.trace("Running on {}: {}", self.target, command)

        completed = subprocess.run(
            self._ssh_args(command),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            text=True,
            errors="replace",
        )

        return CommandResult(
            args=args, returncode=completed.returncode, stdout=completed.stdout
        )

    def launch(self, args: list[str], output: str) -> BackgroundProcess:
        # The remote shell reports its PID before exec'ing the command, so
        # that the PID is the command's own and we can kill it later.
        script = f"echo $$; exec {shlex.join(args)} > {shlex.quote(output)}"
        command = shlex.join(["sh", "-c", script])

        logger.trace("Launching on {}: {}", self.target, command)

        process = subprocess.Popen(
            self._ssh_args(command),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            text=True,
        )

        sentinel = process.stdout.readline().strip()
        # Nothing else is written to stdout once the command is exec'd.
        process.stdout.close()

        if sentinel.isdigit():
            pid = int(sentinel)
            logger.debug("Remote process started on {} with PID {}", self.target, pid)
        else:
            pid = None
            logger.debug("Remote process on {} did not report a PID", self.target)

        return BackgroundProcess(args=args, process=process, pid=pid)

    def pipeline(self, stages: list[list[str]]) -> int:
        # Without pipefail this is the exit code of the last stage only.
        command = " | ".join(shlex.join(stage) for stage in stages)

        logger.trace("Running pipeline on {}: {}", self.target, command)

        return subprocess.run(
            self._ssh_args(command), stdin=subprocess.DEVNULL
        ).returncode

    def cancel(self, handle: BackgroundProcess):
        # Killing the ssh client does not kill the remote command, and the
        # client may already be gone (SIGINT reaches the whole process group).
        # Only an exit status relayed by ssh (0 to 254) means the remote
        # command itself has finished.
        returncode = handle.poll()
        remote_finished = returncode is not None and 0 <= returncode < SSH_FAILURE

        if handle.pid is not None and not remote_finished:
            result = self.run(["kill", str(handle.pid)])

            if not result.ok:
                logger.warning(
                    "Could not kill remote PID {} on {}", handle.pid, self.target
                )

        self._stop_local(handle.process)
