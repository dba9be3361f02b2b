"""
Models for the parameters of a single nc_wire invocation.
"""

import os.path
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TransferRequest(BaseModel):
    """
    The parameters of one invocation. Built once from the command line and
    never modified afterwards.
    """

    model_config = ConfigDict(frozen=True)

    source: Path
    "Path to the local file, as given on the command line."
    destination_ip: str = Field(min_length=1)
    "Address the local sender connects to."
    destination_port: int = Field(ge=1, le=65535)
    "Port the remote receiver listens on."
    ssh_target: str = Field(min_length=1)
    "Anything ssh accepts as a destination (user@host, a config alias, ...)."
    destination_folder: str = Field(min_length=1)
    "Folder on the remote host that receives the file."
    verify: bool = False
    "Whether to compare checksums of the source and the copy."
    verbose: bool = False
    "Whether diagnostic logging is shown."

    @field_validator("destination_folder")
    def strip_trailing_slash(cls, v: str) -> str:
        """
        Removes trailing slashes, keeping the root folder intact.
        """

        return v.rstrip("/") or "/"

    @property
    def resolved_source(self) -> Path:
        """
        The canonical absolute path of the source, with symlinks resolved.
        """
        return Path(os.path.realpath(self.source))

    @property
    def out_file(self) -> str:
        """
        The name of the file on the remote host; always the base name of the source.
        """
        return self.source.name

    @property
    def destination_path(self) -> str:
        if self.destination_folder == "/":
            return "/" + self.out_file

        return f"{self.destination_folder}/{self.out_file}"
