"""Application services for the npub CLI.

Services implement the release workflow, coordinating between the domain
layer (core/) and the process and filesystem adapters (platform/).
"""

from npub.services.release.config import ReleaseOptions, ResolvedConfig, resolve_config
from npub.services.release.errors import ReleaseError
from npub.services.release.pipeline import run_release

__all__ = [
    "ReleaseError",
    "ReleaseOptions",
    "ResolvedConfig",
    "resolve_config",
    "run_release",
]
