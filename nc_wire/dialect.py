"""
Detection of the command-line dialect spoken by a netcat binary.

OpenBSD netcat closes the connection after EOF on stdin with ``-N``, and
listens with ``nc -l <port>``. Traditional (GNU/hobbit) netcat uses
``-q <seconds>`` for the same job and wants ``nc -l -p <port>``. Mixing
the two can leave the receiver waiting forever or truncate the file,
so we probe both sides before moving any data.
"""

from enum import Enum

from loguru import logger

from .exceptions import DialectUnknown
from .executors.core import CoreExecutor

MODERN_MARKER = "-N"
"Flag advertised by netcat builds that close the connection on EOF."
LEGACY_MARKER = "-q"
"Flag advertised by netcat builds that close after a delay."


class NcDialect(Enum):
    """
    The command-line flavor of a netcat binary, for the role it plays.
    """

    LISTEN_MODERN = "listen-modern"
    LISTEN_LEGACY = "listen-legacy"
    CONNECT_MODERN = "connect-modern"
    CONNECT_LEGACY = "connect-legacy"
    UNKNOWN = "unknown"

    def __str__(self):
        return self.value

    @property
    def modern(self) -> bool:
        return self in (NcDialect.LISTEN_MODERN, NcDialect.CONNECT_MODERN)


def classify_help_text(text: str, listening: bool) -> NcDialect:
    """
    Classify the output of ``nc -h``.

    Parameters
    ----------
    text : str
        Combined stdout and stderr of ``nc -h``.
    listening : bool
        Whether the binary will be used to receive (listen) or to send
        (connect).

    Returns
    -------
    NcDialect
        The modern dialect if the ``-N`` marker appears (even if ``-q`` does
        too), the legacy dialect if only ``-q`` appears, UNKNOWN otherwise.
    """

    if MODERN_MARKER in text:
        return NcDialect.LISTEN_MODERN if listening else NcDialect.CONNECT_MODERN

    if LEGACY_MARKER in text:
        return NcDialect.LISTEN_LEGACY if listening else NcDialect.CONNECT_LEGACY

    return NcDialect.UNKNOWN


def probe_dialect(executor: CoreExecutor, binary: str, listening: bool) -> NcDialect:
    """
    Run ``<binary> -h`` through the executor and classify the result. The exit
    code is ignored, as plenty of netcat builds exit non-zero after printing
    their help.
    """

    side = "remote" if listening else "local"

    logger.debug("Probing {} nc capabilities...", side)

    result = executor.run([binary, "-h"], merge_stderr=True)
    dialect = classify_help_text(result.stdout, listening=listening)

    if dialect.modern:
        logger.debug("Auto-detected {} nc supports -N (OpenBSD style)", side)
    elif dialect != NcDialect.UNKNOWN:
        logger.debug("Auto-detected {} nc supports -q (Traditional style)", side)
    else:
        logger.bind(category=DialectUnknown.__name__).warning(
            "Warning: Could not detect optimal {} nc options, using defaults "
            "but might fail to close.",
            side,
        )

    return dialect


def sender_options(dialect: NcDialect) -> list[str]:
    """
    Flags that make the sending netcat close the connection once the input
    is exhausted. Anything but the modern dialect gets the legacy form.
    """

    if dialect == NcDialect.CONNECT_MODERN:
        return ["-N"]

    return ["-q", "0"]


def receiver_options(dialect: NcDialect) -> list[str]:
    """
    Flags that make the receiving netcat listen; the port follows them.
    """

    if dialect == NcDialect.LISTEN_MODERN:
        return ["-l"]

    return ["-l", "-p"]


def sender_command(binary: str, dialect: NcDialect, ip: str, port: int) -> list[str]:
    return [binary, *sender_options(dialect), ip, str(port)]


def receiver_command(binary: str, dialect: NcDialect, port: int) -> list[str]:
    return [binary, *receiver_options(dialect), str(port)]
