"""Core domain types and logic."""

from .config import BuildConfig, ConfigError, load_config_file, merge_config
from .errors import ErrorCode
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "BuildConfig",
    "ConfigError",
    "load_config_file",
    "merge_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
