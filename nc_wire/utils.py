"""
Useful utilities for checksums.
"""

import hashlib
from pathlib import Path

import xxhash

HASH_FUNCS = {
    "md5": hashlib.md5,
    "xxh3": xxhash.xxh3_128,
    "sha1": hashlib.sha1,
    "sha256": hashlib.sha256,
    "sha512": hashlib.sha512,
}

# The coreutils-style utility (digest, whitespace, file name on one line)
# that computes the same digest as HASH_FUNCS on the remote host.
REMOTE_HASH_COMMANDS = {
    "md5": "md5sum",
    "xxh3": "xxh128sum",
    "sha1": "sha1sum",
    "sha256": "sha256sum",
    "sha512": "sha512sum",
}


def _filehash(filepath, hashfunc):
    hasher = hashfunc()
    blocksize = 64 * 1024

    with open(filepath, "rb") as fp:
        while True:
            data = fp.read(blocksize)
            if not data:
                break
            hasher.update(data)
    return hasher.hexdigest()


def get_checksum_from_path(path: str | Path, hash_function: str = "sha256") -> str:
    """
    Compute the checksum of a file from a path. You always have the hashing
    function pre-pended to the hash itself, so that checksums made with
    different functions are never compared.
    """

    if hash_function not in HASH_FUNCS:
        raise NotImplementedError("{} not implemented.".format(hash_function))

    path = Path(path).resolve()

    return hash_function + ":::" + _filehash(path, HASH_FUNCS[hash_function])


def parse_digest_line(output: str) -> str:
    """
    Pull the digest out of the output of a ``sha256sum``-style utility:
    the first whitespace-delimited token, lower-cased. Returns an empty
    string if there is no output at all.
    """

    tokens = output.split()

    if not tokens:
        return ""

    # GNU coreutils prefixes the line with a backslash when the file name
    # needed escaping.
    return tokens[0].lstrip("\\").lower()


def get_hash_function_from_hash(hash: str) -> str | None:
    """
    Searches the hash for the hash function. Returns None if the hash
    carries no prefix.
    """

    for hash_func_name in HASH_FUNCS.keys():
        if hash.startswith(hash_func_name + ":::"):
            return hash_func_name

    return None


def get_base_hash_from_hash(hash: str) -> str:
    """
    Gets the 'base' hash without our hashfunc::: prepended.
    """

    for hash_func_name in HASH_FUNCS.keys():
        if hash.startswith(hash_func_name + ":::"):
            return hash.replace(hash_func_name + ":::", "")

    return hash


def compare_checksums(a: str, b: str) -> bool:
    """
    Compares two checksums to see if they match. Digests are compared as
    lower-case hex strings.

    Raises a ValueError if a, b were checksummed with differing algorithms.
    """

    hf_a = get_hash_function_from_hash(a)
    hf_b = get_hash_function_from_hash(b)

    if hf_a != hf_b:
        raise ValueError(
            f"Checksums {a} and {b} were created with differing hash functions!"
        )

    return (
        get_base_hash_from_hash(a).strip().lower()
        == get_base_hash_from_hash(b).strip().lower()
    )


def get_size_from_path(path: str | Path) -> int:
    """Get the number of bytes in the file at `path`."""

    return Path(path).resolve().stat().st_size


def sizeof_fmt(num, suffix="B"):
    """Format the size of a file in human-readable values.

    Parameters
    ----------
    num : int
        File size in bytes.
    suffix : str
        Suffix to use.

    Returns
    -------
    output : str
        Human readable filesize.
    """
    for unit in ["", "k", "M", "G", "T", "P", "E", "Z"]:
        if abs(num) < 1024.0:
            return "{0:3.1f} {1:}{2:}".format(num, unit, suffix)
        num /= 1024.0
    return "{0:.1f} {1:}{2:}".format(num, "Y", suffix)
