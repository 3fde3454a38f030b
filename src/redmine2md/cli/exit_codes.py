"""
Exit Codes - Process exit statuses of the CLI.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit statuses returned by ``main``."""

    SUCCESS = 0
    ERROR = 1
    INVALID_ARGS = 2
    CONFIG_ERROR = 3
    SYNC_FAILED = 4
    PARTIAL_FAILURE = 5
    INTERRUPTED = 130
