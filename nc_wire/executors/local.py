"""
Local executor. Basically just a wrapper around `subprocess`.
"""

import subprocess

from loguru import logger

from .core import BackgroundProcess, CommandResult, CoreExecutor

COMMAND_NOT_FOUND = 127


class LocalExecutor(CoreExecutor):
    def run(self, args: list[str], merge_stderr: bool = False) -> CommandResult:
        logger.trace("Running locally: {}", args)

        try:
            completed = subprocess.run(
                args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else None,
                text=True,
                errors="replace",
            )
        except FileNotFoundError:
            # Behave like a shell would.
            return CommandResult(args=args, returncode=COMMAND_NOT_FOUND)

        return CommandResult(
            args=args, returncode=completed.returncode, stdout=completed.stdout
        )

    def launch(self, args: list[str], output: str) -> BackgroundProcess:
        logger.trace("Launching locally: {} > {}", args, output)

        with open(output, "wb") as handle:
            process = subprocess.Popen(args, stdin=subprocess.DEVNULL, stdout=handle)

        return BackgroundProcess(args=args, process=process, pid=process.pid)

    def pipeline(self, stages: list[list[str]]) -> int:
        logger.trace("Running local pipeline: {}", stages)

        processes = []
        upstream = None

        try:
            for index, stage in enumerate(stages):
                last = index == len(stages) - 1
                process = subprocess.Popen(
                    stage,
                    stdin=upstream,
                    stdout=None if last else subprocess.PIPE,
                )
                # Close our copy so the upstream stage gets SIGPIPE if the
                # downstream one exits early.
                if upstream is not None:
                    upstream.close()
                upstream = process.stdout
                processes.append(process)
        except BaseException:
            for process in processes:
                self._stop_local(process)
            raise

        returncodes = [process.wait() for process in processes]

        # The last stage to fail is the one that caused the others to: an
        # upstream stage that loses its reader dies of SIGPIPE.
        for returncode in reversed(returncodes):
            if returncode != 0:
                return returncode

        return 0

    def cancel(self, handle: BackgroundProcess):
        self._stop_local(handle.process)
