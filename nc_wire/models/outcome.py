"""
Models for the end state of a transfer.
"""

from pydantic import BaseModel

from ..dialect import NcDialect
from ..transfer import TransferStatus


class TransferOutcome(BaseModel):
    """
    The end state of one run. The process exit code derives from it.
    """

    status: TransferStatus
    "Final status of the transfer."
    source_checksum: str | None = None
    "Checksum of the local file, if verification was requested."
    destination_checksum: str | None = None
    "Checksum of the remote copy, if verification was requested."
    local_dialect: NcDialect | None = None
    "Dialect spoken by the local (sending) netcat."
    remote_dialect: NcDialect | None = None
    "Dialect spoken by the remote (receiving) netcat."
    receiver_exit_code: int | None = None
    "Exit code reported by the remote receiver."
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status == TransferStatus.COMPLETED

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1
