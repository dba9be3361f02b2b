"""
End-to-end verification of a copy: the source is hashed here before the
transfer, the destination is hashed on the remote host afterwards, and
the two digests must agree exactly.
"""

from pathlib import Path

from loguru import logger

from .exceptions import IntegrityMismatch
from .executors.core import CoreExecutor
from .utils import (
    REMOTE_HASH_COMMANDS,
    compare_checksums,
    get_base_hash_from_hash,
    get_checksum_from_path,
    parse_digest_line,
)


class IntegrityVerifier:
    """
    Computes and compares checksums of the two ends of a transfer.

    Parameters
    ----------
    remote : CoreExecutor
        Executor for the host holding the destination file.
    hash_function : str
        Name of the hash function, one of utils.HASH_FUNCS. The remote host
        uses the matching utility from utils.REMOTE_HASH_COMMANDS.
    """

    def __init__(self, remote: CoreExecutor, hash_function: str = "sha256"):
        self.remote = remote
        self.hash_function = hash_function

    @property
    def remote_command(self) -> str:
        return REMOTE_HASH_COMMANDS[self.hash_function]

    def source_checksum(self, path: Path) -> str:
        logger.debug('Computing {} of "{}"', self.hash_function, path)

        checksum = get_checksum_from_path(path, hash_function=self.hash_function)

        logger.debug('Source checksum: "{}"', get_base_hash_from_hash(checksum))

        return checksum

    def destination_checksum(self, path: str) -> str:
        """
        Hash the destination file on the remote host. A failing remote
        command yields an empty digest, which never matches.
        """

        logger.debug('Computing {} of "{}"', self.remote_command, path)

        result = self.remote.run([self.remote_command, path])

        if not result.ok:
            logger.error(
                "{} exited with code {} on the remote host",
                self.remote_command,
                result.returncode,
            )

        digest = parse_digest_line(result.stdout) if result.ok else ""

        logger.debug('Destination checksum: "{}"', digest)

        return self.hash_function + ":::" + digest

    def verify(self, source_checksum: str, destination_checksum: str) -> bool:
        """
        Compare the two checksums.

        Raises
        ------
        IntegrityMismatch
            If they differ. The destination file is left where it is.
        """

        if not compare_checksums(source_checksum, destination_checksum):
            raise IntegrityMismatch(
                get_base_hash_from_hash(source_checksum),
                get_base_hash_from_hash(destination_checksum),
            )

        logger.debug("Checksum match: \"{}\"", get_base_hash_from_hash(source_checksum))

        return True
