"""
The rendezvous between the remote receiver and the local sender.

The receiver is started on the remote host in the background and we
hold on to its handle for the rest of the transfer. Once it is listening,
the local side runs ``pv <file> | nc <ip> <port>``. The stream carries the
raw bytes of the file and nothing else; the receiver knows it is done when
the sender closes the connection.
"""

import subprocess
import time
from pathlib import Path

from loguru import logger

from .dialect import NcDialect, receiver_command, sender_command
from .exceptions import TransferFailure
from .executors.core import BackgroundProcess, CoreExecutor
from .models import TransferRequest
from .settings import WireSettings

COMMAND_NOT_FOUND = 127


def listening_sockets(output: str) -> list[str]:
    """
    The socket lines of ``ss -ltn`` output, without the header.
    """

    return [
        line
        for line in output.splitlines()
        if line.strip() and not line.startswith(("State", "Netid"))
    ]


class Rendezvous:
    """
    Starts the receiver, waits for it to listen, and streams the file to it.

    Parameters
    ----------
    local : CoreExecutor
        Executor for the sending host (this one).
    remote : CoreExecutor
        Executor for the receiving host.
    settings : WireSettings
        Tool names and timing.
    """

    def __init__(
        self, local: CoreExecutor, remote: CoreExecutor, settings: WireSettings
    ):
        self.local = local
        self.remote = remote
        self.settings = settings

    def start_receiver(
        self, request: TransferRequest, dialect: NcDialect
    ) -> BackgroundProcess:
        command = receiver_command(
            self.settings.remote_nc, dialect, request.destination_port
        )

        logger.debug(
            "Starting receiver on {}: {} > {}",
            request.ssh_target,
            " ".join(command),
            request.destination_path,
        )

        return self.remote.launch(command, output=request.destination_path)

    def wait_until_listening(self, handle: BackgroundProcess, port: int):
        """
        Block until the receiver is ready for the sender to connect.

        Raises
        ------
        TransferFailure
            If the receiver exits before it is listening, or is not listening
            after listen_timeout seconds.
        """

        if self.settings.readiness == "sleep":
            self._grace_period()
            return

        deadline = time.monotonic() + self.settings.listen_timeout
        probe = ["ss", "-ltn", f"sport = :{port}"]

        while True:
            returncode = handle.poll()

            if returncode is not None:
                raise TransferFailure(
                    f"Receiver exited with code {returncode} before listening "
                    f"on port {port}",
                    returncode=returncode,
                )

            result = self.remote.run(probe)

            if result.returncode == COMMAND_NOT_FOUND:
                logger.debug("ss is not available on the remote host")
                self._grace_period()
                return

            if result.ok and listening_sockets(result.stdout):
                logger.debug("Receiver is listening on port {}", port)
                return

            if time.monotonic() >= deadline:
                raise TransferFailure(
                    f"Receiver was not listening on port {port} after "
                    f"{self.settings.listen_timeout} seconds"
                )

            time.sleep(self.settings.poll_interval)

    def _grace_period(self):
        logger.debug(
            "Waiting {} seconds before starting sender", self.settings.grace_period
        )
        time.sleep(self.settings.grace_period)

    def send(self, source: Path, request: TransferRequest, dialect: NcDialect):
        """
        Stream the file through pv into the local netcat.

        Raises
        ------
        TransferFailure
            If pv or netcat exits non-zero (including a refused connection).
        """

        stages = [
            [self.settings.pv, str(source)],
            sender_command(
                self.settings.local_nc,
                dialect,
                request.destination_ip,
                request.destination_port,
            ),
        ]

        logger.debug("Starting sender")

        returncode = self.local.pipeline(stages)

        if returncode != 0:
            raise TransferFailure(
                f"Sender exited with code {returncode}", returncode=returncode
            )

    def wait_for_receiver(self, handle: BackgroundProcess) -> int:
        try:
            returncode = handle.wait(timeout=self.settings.receiver_timeout)
        except subprocess.TimeoutExpired:
            raise TransferFailure(
                f"Receiver did not exit within {self.settings.receiver_timeout} "
                "seconds of the sender finishing"
            )

        if returncode != 0:
            raise TransferFailure(
                f"Receiver exited with code {returncode}", returncode=returncode
            )

        return returncode

    def transfer(
        self,
        source: Path,
        request: TransferRequest,
        local_dialect: NcDialect,
        remote_dialect: NcDialect,
    ) -> int:
        """
        Run the whole rendezvous. The receiver is always launched before the
        sender, and is cancelled if anything goes wrong (including an
        interrupt) before it has exited.

        Returns
        -------
        int
            The exit code of the receiver.
        """

        handle = self.start_receiver(request, remote_dialect)

        try:
            self.wait_until_listening(handle, request.destination_port)
            self.send(source, request, local_dialect)
            return self.wait_for_receiver(handle)
        except BaseException:
            logger.debug("Cancelling receiver on {}", request.ssh_target)
            self.remote.cancel(handle)
            raise
