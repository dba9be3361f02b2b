"""
Checks that run before any data moves. Each one raises at the first
problem; there is no retry.
"""

import os
import shutil
from pathlib import Path

from loguru import logger

from .exceptions import (
    ConnectivityFailure,
    DestinationUnwritable,
    MissingDependency,
    SourceMissing,
    SourceUnreadable,
)
from .executors.core import CoreExecutor
from .models import TransferRequest

# Positional parameter so the folder never needs quoting inside the script.
WRITABLE_FOLDER_TEST = 'test -d "$1" && test -w "$1"'


def check_dependencies(binaries: list[str]):
    """
    Make sure every external tool we shell out to is installed locally.

    Raises
    ------
    MissingDependency
        For the first tool that cannot be found on PATH.
    """

    for binary in binaries:
        if shutil.which(binary) is None:
            raise MissingDependency(binary)

    return


def check_source(request: TransferRequest) -> Path:
    """
    Resolve the source path and check that it is a readable regular file.

    Returns
    -------
    Path
        The canonical absolute path of the source.

    Raises
    ------
    SourceMissing
        If nothing, or something other than a regular file, is at the path.
    SourceUnreadable
        If the file cannot be read by this process.
    """

    path = request.resolved_source

    if not path.is_file():
        raise SourceMissing(f"File {path} does not exist.")

    if not os.access(path, os.R_OK):
        raise SourceUnreadable(f"File {path} is not readable.")

    return path


def check_connectivity(remote: CoreExecutor, target: str):
    logger.debug("Checking SSH connection to {}...", target)

    if not remote.run(["true"]).ok:
        raise ConnectivityFailure(f"Error: Cannot connect to {target}")


def check_destination(remote: CoreExecutor, target: str, folder: str):
    logger.debug("Checking destination folder on remote...")

    result = remote.run(["sh", "-c", WRITABLE_FOLDER_TEST, "nc_wire", folder])

    if not result.ok:
        raise DestinationUnwritable(
            f'Error: Destination folder "{folder}" does not exist or is not '
            f"writable on {target}"
        )


def run_preflight(remote: CoreExecutor, request: TransferRequest) -> Path:
    """
    All of the checks that need no netcat: the local source first, then
    the remote host and folder.
    """

    source = check_source(request)
    check_connectivity(remote, request.ssh_target)
    check_destination(remote, request.ssh_target, request.destination_folder)

    return source
