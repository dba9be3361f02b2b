"""
nc_wire settings. A pydantic model deserialized from the available
config path; every value can be overridden with an NC_WIRE_* environment
variable.
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils import HASH_FUNCS, REMOTE_HASH_COMMANDS

if TYPE_CHECKING:
    wire_settings: "WireSettings"


class LogSettings(BaseModel):
    """
    Settings for the loguru logger.
    """

    files: dict[Path, str] = {}
    "Egress files for the logger. Rotation (e.g. 500 MB, 1 week) is the string."
    file_level: str = "DEBUG"
    "Level of the messages written to the files."


class WireSettings(BaseSettings):
    """
    Settings for nc_wire. Note that because this is a BaseSettings
    object, you can overwrite the values in the config file with environment
    variables.
    """

    # External tools.
    pv: str = "pv"
    local_nc: str = "nc"
    remote_nc: str = "nc"
    ssh: str = "ssh"

    # Extra options for every ssh call, e.g. ["-o", "BatchMode=yes"].
    ssh_options: list[str] = []

    # Checksum used with -a. Must have a matching utility on the remote.
    hash_function: str = "sha256"

    # How to decide that the remote receiver is ready. 'probe' asks the
    # remote for a listening socket on the port; 'sleep' waits grace_period.
    readiness: Literal["probe", "sleep"] = "probe"
    grace_period: float = Field(default=3.0, ge=0.0)
    listen_timeout: float = Field(default=10.0, gt=0.0)
    poll_interval: float = Field(default=0.25, gt=0.0)

    # How long the receiver may take to exit once the sender is done.
    receiver_timeout: float = Field(default=30.0, gt=0.0)

    log_settings: LogSettings = LogSettings()

    model_config = SettingsConfigDict(env_prefix="nc_wire_")

    @field_validator("hash_function")
    def hash_function_is_valid(cls, v: str) -> str:
        """
        Validates that we can compute the hash locally and remotely.
        """

        if v not in HASH_FUNCS:
            raise ValueError(
                f"Invalid hash function {v}, choose from {list(HASH_FUNCS.keys())}"
            )

        return v

    @property
    def remote_hash_command(self) -> str:
        return REMOTE_HASH_COMMANDS[self.hash_function]

    @property
    def required_binaries(self) -> list[str]:
        """
        Tools that must be present locally before we do anything.
        """
        return [self.pv, self.local_nc, self.ssh, self.remote_hash_command]

    @classmethod
    def from_file(cls, config_path: Path | str) -> "WireSettings":
        """
        Loads the settings from the given path.
        """

        with open(config_path, "r") as handle:
            return cls.model_validate_json(handle.read())


# Automatically create a settings object on use.

_settings = None


def load_settings() -> WireSettings:
    """
    Load the settings from the config file.
    """

    global _settings

    try_paths = [
        os.environ.get("NC_WIRE_CONFIG", None),
        Path.home() / ".nc_wire.cfg",
        Path.home() / ".nc_wire.json",
    ]

    for path in try_paths:
        if path is not None:
            path = Path(path)
        else:
            continue

        if path.exists():
            _settings = WireSettings.from_file(path)
            return _settings

    _settings = WireSettings()

    return _settings


def __getattr__(name):
    """
    Try to load the settings if they haven't been loaded yet.
    """

    if name == "wire_settings":
        global _settings

        if _settings is not None:
            return _settings

        return load_settings()

    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
