"""
Pydantic models carrying state between the stages of a transfer.
"""

from .outcome import TransferOutcome
from .request import TransferRequest
