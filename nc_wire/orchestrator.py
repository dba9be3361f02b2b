"""
The transfer sequence, from preflight to verification.
"""

from loguru import logger

from .dialect import probe_dialect
from .executors.core import CoreExecutor
from .integrity import IntegrityVerifier
from .models import TransferOutcome, TransferRequest
from .preflight import run_preflight
from .rendezvous import Rendezvous
from .settings import WireSettings
from .transfer import TransferStatus
from .utils import get_size_from_path, sizeof_fmt


def run_transfer(
    request: TransferRequest,
    local: CoreExecutor,
    remote: CoreExecutor,
    settings: WireSettings,
) -> TransferOutcome:
    """
    Copy request.source to request.destination_path on the remote host.

    Stages run strictly in order: preflight, netcat probing on both sides,
    source checksum, rendezvous, destination checksum. Any failure raises
    an NcWireError from the stage that detected it and nothing after that
    stage runs.

    Parameters
    ----------
    request : TransferRequest
        What to copy, and where.
    local : CoreExecutor
        Executor for this host.
    remote : CoreExecutor
        Executor for the destination host.
    settings : WireSettings
        Tool names, hash function and timing.

    Returns
    -------
    TransferOutcome
        A COMPLETED outcome.
    """

    source = run_preflight(remote, request)

    local_dialect = probe_dialect(local, settings.local_nc, listening=False)
    logger.debug("Local nc dialect: {}", local_dialect)

    remote_dialect = probe_dialect(remote, settings.remote_nc, listening=True)
    logger.debug("Remote nc dialect: {}", remote_dialect)

    verifier = None
    source_checksum = None

    if request.verify:
        verifier = IntegrityVerifier(remote, hash_function=settings.hash_function)
        source_checksum = verifier.source_checksum(source)

    logger.debug(
        'Transferring "{}" ({}) to {}:"{}"',
        source,
        sizeof_fmt(get_size_from_path(source)),
        request.ssh_target,
        request.destination_path,
    )

    receiver_exit_code = Rendezvous(local, remote, settings).transfer(
        source, request, local_dialect, remote_dialect
    )

    destination_checksum = None

    if verifier is not None:
        destination_checksum = verifier.destination_checksum(request.destination_path)
        verifier.verify(source_checksum, destination_checksum)

    return TransferOutcome(
        status=TransferStatus.COMPLETED,
        source_checksum=source_checksum,
        destination_checksum=destination_checksum,
        local_dialect=local_dialect,
        remote_dialect=remote_dialect,
        receiver_exit_code=receiver_exit_code,
        message=(
            f"Transferred {source} to {request.ssh_target}:{request.destination_path}"
        ),
    )
