"""
Shared fixtures amongst all tests.

The fake executors stand in for ssh, netcat and the remote host: the
"remote" filesystem is a temporary directory, and the "network" hands
the bytes from the local sender's pipeline to whichever fake receiver
was launched on the port.
"""

import random
import subprocess
from pathlib import Path

import loguru
import pytest
from pydantic import ConfigDict

from nc_wire.executors.core import BackgroundProcess, CommandResult, CoreExecutor
from nc_wire.settings import WireSettings
from nc_wire.utils import HASH_FUNCS, REMOTE_HASH_COMMANDS, _filehash

OPENBSD_HELP = """\
OpenBSD netcat (Debian patchlevel 1.219-1)
usage: nc [-46CDdFhklNnrStUuvZz] [-I length] [-i interval] [-M ttl]
	  [-m minttl] [-O length] [-P proxy_username] [-p source_port]
	  [-q seconds] [-s sourceaddr] [-T keyword] [-V rtable] [-W recvlimit]
	  [-w timeout] [-X proxy_protocol] [-x proxy_address[:port]]
	  [destination] [port]
	Command Summary:
		-l		Listen mode, for inbound connects
		-N		Shutdown the network socket after EOF on stdin
		-q secs		quit after EOF on stdin and delay of secs
"""

TRADITIONAL_HELP = """\
[v1.10-47]
connect to somewhere:	nc [-options] hostname port[s] [ports] ...
listen for inbound:	nc -l -p port [-options] [hostname] [port]
options:
	-l			listen mode, for inbound connects
	-n			numeric-only IP addresses, no DNS
	-p port			local port number
	-q secs			quit after EOF on stdin and delay of secs
	-w secs			timeout for connects and final net reads
"""

UNKNOWN_HELP = """\
BusyBox v1.36.1 (2023-11-07 18:53:09 UTC) multi-call binary.

Usage: nc [OPTIONS] HOST PORT  - connect
nc [OPTIONS] -l -p PORT [HOST] [PORT]  - listen

	-e PROG	Run PROG after connect (must be last)
	-l	Listen mode, for inbound connects
	-lk	With -e, provides persistent server
	-p PORT	Local port
	-s ADDR	Local address
	-w SEC	Timeout for connects and final net reads
	-i SEC	Delay interval for lines sent
	-n	Don't do DNS resolution
	-u	UDP mode
	-v	Verbose
"""

COMMAND_NOT_FOUND = 127
SSH_FAILURE = 255


class FakeProcess:
    """
    Just enough of subprocess.Popen for a BackgroundProcess.
    """

    def __init__(self, args):
        self.args = args
        self.returncode = None
        self.terminated = False

    def poll(self):
        return self.returncode

    def wait(self, timeout=None):
        if self.returncode is None:
            raise subprocess.TimeoutExpired(self.args, timeout)

        return self.returncode

    def terminate(self):
        self.terminated = True
        self.returncode = -15

    def kill(self):
        self.returncode = -9


class FakeNetwork:
    """
    Connects fake senders to fake receivers by port.
    """

    def __init__(self):
        self.listeners = {}
        self.events = []
        self.corrupt = False
        "Flip a bit of the last byte on delivery."
        self.receiver_exit_code = 0

    def listen(self, port: int, output: str, process: FakeProcess):
        self.events.append(("listen", port))
        self.listeners[port] = (output, process)

    def deliver(self, port: int, data: bytes) -> bool:
        self.events.append(("connect", port))

        if port not in self.listeners:
            return False

        output, process = self.listeners.pop(port)

        if self.corrupt and data:
            data = data[:-1] + bytes([data[-1] ^ 0x01])

        # The receiver truncates, it never appends.
        with open(output, "wb") as handle:
            handle.write(data)

        process.returncode = self.receiver_exit_code

        return True


class FakeRemote(CoreExecutor):
    """
    A remote host reached over a fake ssh.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    network: FakeNetwork
    help_text: str = OPENBSD_HELP
    reachable: bool = True
    writable: bool = True
    has_ss: bool = True
    listen_after_probes: int = 0
    "Number of ss probes that report nothing before the port shows up."
    exit_before_listening: int | None = None
    "If set, launched receivers exit immediately with this code."

    calls: list[list[str]] = []
    launches: list[list[str]] = []
    cancelled: list[BackgroundProcess] = []
    probes: int = 0

    def run(self, args, merge_stderr=False):
        self.calls.append(list(args))

        if not self.reachable:
            return CommandResult(args=args, returncode=SSH_FAILURE)

        program = args[0]

        if program == "true":
            return CommandResult(args=args, returncode=0)

        if program == "sh":
            ok = self.writable and Path(args[-1]).is_dir()
            return CommandResult(args=args, returncode=0 if ok else 1)

        if program == "nc" and args[1:] == ["-h"]:
            return CommandResult(args=args, returncode=1, stdout=self.help_text)

        if program == "ss":
            return self._ss(args)

        if program in REMOTE_HASH_COMMANDS.values():
            return self._hash(args)

        if program == "kill":
            return CommandResult(args=args, returncode=0)

        return CommandResult(args=args, returncode=COMMAND_NOT_FOUND)

    def _ss(self, args):
        if not self.has_ss:
            return CommandResult(args=args, returncode=COMMAND_NOT_FOUND)

        self.probes += 1
        port = int(args[-1].split(":")[-1])
        stdout = "State  Recv-Q Send-Q Local Address:Port Peer Address:Port Process\n"

        if port in self.network.listeners and self.probes > self.listen_after_probes:
            stdout += f"LISTEN 0      1            0.0.0.0:{port}      0.0.0.0:*\n"

        return CommandResult(args=args, returncode=0, stdout=stdout)

    def _hash(self, args):
        function = {v: k for k, v in REMOTE_HASH_COMMANDS.items()}[args[0]]
        path = Path(args[1])

        if not path.exists():
            return CommandResult(args=args, returncode=1)

        digest = _filehash(path, HASH_FUNCS[function])

        return CommandResult(args=args, returncode=0, stdout=f"{digest}  {path}\n")

    def launch(self, args, output):
        self.launches.append(list(args))

        process = FakeProcess(args)
        handle = BackgroundProcess(args=args, process=process, pid=4242)

        if self.exit_before_listening is not None:
            process.returncode = self.exit_before_listening
        else:
            self.network.listen(int(args[-1]), output, process)

        return handle

    def pipeline(self, stages):
        raise NotImplementedError

    def cancel(self, handle):
        self.cancelled.append(handle)
        self.network.listeners.pop(int(handle.args[-1]), None)
        if handle.running:
            handle.process.terminate()

    @property
    def hash_calls(self) -> list[list[str]]:
        return [c for c in self.calls if c[0] in REMOTE_HASH_COMMANDS.values()]


class FakeLocal(CoreExecutor):
    """
    This host, with pv and netcat replaced by the fake network.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    network: FakeNetwork
    help_text: str = OPENBSD_HELP
    sender_exit_code: int | None = None
    "If set, the sender exits with this code without reaching the network."
    interrupt: bool = False
    "Raise KeyboardInterrupt in the middle of sending."

    calls: list[list[str]] = []
    pipelines: list[list[list[str]]] = []

    def run(self, args, merge_stderr=False):
        self.calls.append(list(args))

        if args[0] == "nc" and args[1:] == ["-h"]:
            return CommandResult(args=args, returncode=1, stdout=self.help_text)

        return CommandResult(args=args, returncode=COMMAND_NOT_FOUND)

    def launch(self, args, output):
        raise NotImplementedError

    def pipeline(self, stages):
        self.pipelines.append(stages)

        if self.interrupt:
            raise KeyboardInterrupt

        if self.sender_exit_code is not None:
            return self.sender_exit_code

        pv, nc = stages

        with open(pv[-1], "rb") as handle:
            data = handle.read()

        delivered = self.network.deliver(int(nc[-1]), data)

        # netcat exits 1 on a refused connection.
        return 0 if delivered else 1

    def cancel(self, handle):
        pass


@pytest.fixture
def garbage_file(tmp_path) -> Path:
    """
    Returns a file filled with garbage at the path.
    """

    data = random.randbytes(1024)

    path = tmp_path / "garbage_file.txt"

    with open(path, "wb") as handle:
        handle.write(data)

    yield path

    # Delete the file for good measure.
    try:
        path.unlink()
    except FileNotFoundError:
        pass


@pytest.fixture
def remote_folder(tmp_path) -> Path:
    """
    The folder standing in for the destination on the remote host.
    """

    path = tmp_path / "remote"
    path.mkdir()

    return path


@pytest.fixture
def network():
    return FakeNetwork()


@pytest.fixture
def fake_remote(network):
    return FakeRemote(network=network)


@pytest.fixture
def fake_local(network):
    return FakeLocal(network=network)


@pytest.fixture
def settings(monkeypatch):
    """
    Settings that do not wait around.
    """

    for name in ["NC_WIRE_READINESS", "NC_WIRE_GRACE_PERIOD", "NC_WIRE_HASH_FUNCTION"]:
        monkeypatch.delenv(name, raising=False)

    return WireSettings(
        readiness="probe",
        grace_period=0.0,
        listen_timeout=1.0,
        poll_interval=0.01,
        receiver_timeout=0.1,
    )


@pytest.fixture(autouse=True)
def reset_logging():
    """
    Drop any sinks a test added, so they never outlive its captured streams.
    """

    yield

    loguru.logger.remove()
