"""
Exceptions for nc_wire. Every fatal condition is raised as a subclass
of NcWireError at the point where it is detected.
"""

from .errors import ErrorCategory


class NcWireError(Exception):
    category: ErrorCategory = ErrorCategory.TRANSFER

    def __init__(self, message):
        super(NcWireError, self).__init__(message)
        self.message = message


class MissingDependency(NcWireError):
    category = ErrorCategory.CONFIGURATION

    def __init__(self, tool):
        super(MissingDependency, self).__init__(
            f"{tool} is not installed. Please install it first."
        )
        self.tool = tool


class InvalidInvocation(NcWireError):
    category = ErrorCategory.INVOCATION


class ConnectivityFailure(NcWireError):
    category = ErrorCategory.NETWORK_AVAILABILITY


class DestinationUnwritable(NcWireError):
    category = ErrorCategory.DESTINATION


class SourceMissing(NcWireError):
    category = ErrorCategory.SOURCE


class SourceUnreadable(SourceMissing):
    pass


class IntegrityMismatch(NcWireError):
    category = ErrorCategory.DATA_INTEGRITY

    def __init__(self, source_checksum, destination_checksum):
        super(IntegrityMismatch, self).__init__(
            f"Checksum mismatch: \"{source_checksum}\" != \"{destination_checksum}\""
        )
        self.source_checksum = source_checksum
        self.destination_checksum = destination_checksum


class TransferFailure(NcWireError):
    category = ErrorCategory.TRANSFER

    def __init__(self, message, returncode=None):
        super(TransferFailure, self).__init__(message)
        self.returncode = returncode



class DialectUnknown(UserWarning):
    """
    Neither close-on-EOF flag showed up in a netcat's help text. Only ever
    used to tag the warning logged by the prober; transfers carry on with
    the traditional flags.
    """
