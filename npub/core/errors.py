"""Process exit codes for the npub CLI.

Release errors are mapped onto these codes by the CLI layer, so scripts
driving a release can tell a bad flag from a broken build.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success (including runs where some stages were no-ops)
    - 1: User error (bad flag, bad config, unknown task, cancelled prompt)
    - 2: Environment error (dirty working tree, unusable manifest version)
    - 3: Build error (build script or version bump failed)
    - 4: Network error (registry operation failed)
    - 5: I/O error (manifest missing or not writable)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
