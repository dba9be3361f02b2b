# -*- mode: python; coding: utf-8 -*-
# Copyright 2019 The HERA Collaboration
# Licensed under the 2-clause BSD License.

"""Module for the nc_wire command line script.

"""

import argparse
import sys

from loguru import logger
from pydantic import ValidationError

from .exceptions import InvalidInvocation, NcWireError
from .executors import CoreExecutor, executor_from_name
from .logger import setup_logs
from .models import TransferRequest
from .orchestrator import run_transfer
from .preflight import check_dependencies
from .settings import WireSettings, load_settings

_description = """\
Copies a file to a remote server using netcat (wire transfer) for speed. The
script uses ssh for authentication and shell access to the destination."""

_epilog = """\
Example: nc_wire -f /path/to/file -i 192.168.1.1 -p 2020 -s user@192.168.1.1 -d /path/to/destination/folder
  will create /path/to/destination/folder/file on the destination"""


def die(fmt, *args):
    """Exit the script with the specifying error string.

    This function will exit the interpreter with code 1 and print the specified
    error message.

    Parameters
    ----------
    fmt : str
        String to be appended to the error message.
    args : str
        If `fmt` contains string substitution, args are unpacked for this purpose.

    Returns
    -------
    None

    """
    if not len(args):
        text = str(fmt)
    else:
        text = fmt % args
    print("error:", text, file=sys.stderr)
    sys.exit(1)


class UsageParser(argparse.ArgumentParser):
    """
    An argument parser that raises InvalidInvocation instead of exiting
    with argparse's own status code.
    """

    def error(self, message):
        raise InvalidInvocation(message)


def generate_parser():
    """Make the argparse object for nc_wire.

    There are no subcommands; -h is not special and ends up
    as an unknown flag, which prints the help.

    """
    ap = UsageParser(
        prog="nc_wire",
        usage="%(prog)s [-v] -f <file> -i <ip> -p <port> -s <ssh> -d <folder> [-a]",
        description=_description,
        epilog=_epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )

    ap.add_argument("-v", dest="verbose", action="store_true", help="verbose mode")
    ap.add_argument(
        "-f", dest="file", metavar="<file>", required=True, help="input file"
    )
    ap.add_argument(
        "-i",
        dest="ip",
        metavar="<ip>",
        required=True,
        help="destination ip (recommended to be on the same network as the sender)",
    )
    ap.add_argument(
        "-p",
        dest="port",
        metavar="<port>",
        required=True,
        help="destination port (firewall for the port must be open on the destination)",
    )
    ap.add_argument(
        "-s",
        dest="ssh",
        metavar="<ssh>",
        required=True,
        help="destination ssh (user@ip, short name for ssh config, ...)",
    )
    ap.add_argument(
        "-d",
        dest="folder",
        metavar="<folder>",
        required=True,
        help=(
            "destination folder (must exist on the destination and be "
            "accessible/writeable by the ssh user)"
        ),
    )
    ap.add_argument(
        "-a",
        dest="verify",
        action="store_true",
        help="perform checksum comparison (optional, default: false)",
    )

    return ap


def parse_request(parser, argv=None) -> TransferRequest:
    """
    Parse the command line into a TransferRequest.

    Raises
    ------
    InvalidInvocation
        If a flag is missing, unknown, or has a malformed value.
    """

    args = parser.parse_args(argv)

    try:
        return TransferRequest(
            source=args.file,
            destination_ip=args.ip,
            destination_port=args.port,
            ssh_target=args.ssh,
            destination_folder=args.folder,
            verify=args.verify,
            verbose=args.verbose,
        )
    except ValidationError as e:
        raise InvalidInvocation(
            "; ".join(
                f"{'.'.join(str(x) for x in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
        )


def build_executors(
    request: TransferRequest, settings: WireSettings
) -> tuple[CoreExecutor, CoreExecutor]:
    """
    The local executor and the ssh executor for the destination.
    """

    local = executor_from_name("local")()
    remote = executor_from_name("ssh")(
        target=request.ssh_target, ssh=settings.ssh, options=settings.ssh_options
    )

    return local, remote


def main(argv=None):
    try:
        settings = load_settings()
    except ValidationError as e:
        die("Invalid configuration: %s", e)

    # Missing tools are fatal before anything else happens.
    try:
        check_dependencies(settings.required_binaries)
    except NcWireError as e:
        die(e.message)

    parser = generate_parser()

    try:
        request = parse_request(parser, argv)
    except InvalidInvocation as e:
        # Usage problems always get the full help, like the original getopts loop.
        parser.print_help(sys.stdout)
        die(e.message)

    setup_logs(request.verbose, settings.log_settings)

    local, remote = build_executors(request, settings)

    try:
        outcome = run_transfer(request, local, remote, settings)
    except NcWireError as e:
        logger.error("{} ({})", e.message, e.category)
        die(e.message)
    except KeyboardInterrupt:
        die("Interrupted, transfer cancelled.")

    logger.debug(outcome.message)

    return outcome.exit_code


if __name__ == "__main__":
    sys.exit(main())
