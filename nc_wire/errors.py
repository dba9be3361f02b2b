"""
Error enumeration for nc_wire. Categories of errors.
"""

from enum import Enum


class ErrorCategory(Enum):
    """
    Categories of errors.
    """

    CONFIGURATION = "configuration"
    "Configuration errors are those where a required external tool is missing."

    INVOCATION = "invocation"
    "Invocation errors are those where the command line could not be understood."

    NETWORK_AVAILABILITY = "network_availability"
    "Network availability errors are those where the remote host cannot be reached over ssh."

    DESTINATION = "destination"
    "Destination errors are those where the remote folder does not exist or is not writable."

    SOURCE = "source"
    "Source errors are those where the local file does not exist."

    DATA_INTEGRITY = "data_integrity"
    "Data integrity errors are those where the copied file has the wrong checksum."

    TRANSFER = "transfer"
    "Transfer errors are those where the sender, the receiver, or the pipe between them failed."

    def __str__(self):
        return self.value
