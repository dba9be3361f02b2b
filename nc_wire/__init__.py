"""
nc_wire: copy a file to a remote host with netcat, orchestrated over ssh.

ssh handles authentication and runs the receiving netcat on the remote
host; the bytes themselves travel over a plain TCP connection, which is
much faster than pushing them through ssh's encryption on a trusted
local network.
"""

__version__ = "1.0.0"

from .exceptions import (
    ConnectivityFailure,
    DestinationUnwritable,
    DialectUnknown,
    IntegrityMismatch,
    InvalidInvocation,
    MissingDependency,
    NcWireError,
    SourceMissing,
    SourceUnreadable,
    TransferFailure,
)
from .models import TransferOutcome, TransferRequest
from .orchestrator import run_transfer
