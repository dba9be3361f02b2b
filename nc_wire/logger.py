"""
Logging setup. Use this as 'from loguru import logger' in modules, and
call setup_logs once the verbosity is known.
"""

import sys

import loguru

from .settings import LogSettings

CONSOLE_FORMAT = "nc_wire: {message}"


def setup_logs(verbose: bool, log_settings: LogSettings | None = None):
    """
    Configure the loguru sinks. Diagnostics only reach the terminal in
    verbose mode; fatal errors are printed by the CLI regardless.

    Parameters
    ----------
    verbose : bool
        Whether to add a stderr sink for diagnostic messages.
    log_settings : LogSettings, optional
        File sinks to add in every mode.
    """

    loguru.logger.remove()

    if verbose:
        loguru.logger.add(sys.stderr, level="DEBUG", format=CONSOLE_FORMAT)

    if log_settings is not None:
        for file_name, rotation in log_settings.files.items():
            loguru.logger.add(
                file_name, rotation=rotation, level=log_settings.file_level
            )

    loguru.logger.debug("Logging set up.")

    return
