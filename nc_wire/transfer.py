"""
TransferStatus enum.
"""

from enum import Enum


class TransferStatus(Enum):
    """
    The status of a transfer.
    """

    INITIATED = 0
    "Transfer has been requested, but no bytes have moved yet"
    ONGOING = 1
    "Receiver is listening and the sender is streaming data to it."
    COMPLETED = 3
    "Transfer is completed (and verified, if verification was requested)"
    FAILED = 4
    "Transfer has been confirmed to have failed."
    CANCELLED = 5
    "Transfer was interrupted and the receiver was torn down."
