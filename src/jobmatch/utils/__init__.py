"""
Utility modules for the JobMatch engine.

This package contains shared utilities used across the application:
- config: Configuration management
- logger: Logging infrastructure
- constants: Application-wide constants
- exceptions: Error kinds raised by stores and services
"""

from jobmatch.utils.config import (
    AppSettings,
    get_settings,
    reload_settings,
    ROOT_DIR,
)
from jobmatch.utils.constants import (
    APP_NAME,
    APP_DISPLAY_NAME,
    VERSION,
    MatchScoreLevel,
    MatchSource,
    VectorBackend,
)
from jobmatch.utils.exceptions import (
    InputValidationError,
    JobMatchError,
    MalformedResponseError,
    NetworkError,
    ProviderUnavailableError,
    RequestTimeoutError,
)
from jobmatch.utils.logger import (
    setup_logging,
    get_logger,
    audit_log,
    log,
)

__all__ = [
    # Config
    "AppSettings",
    "get_settings",
    "reload_settings",
    "ROOT_DIR",
    # Constants
    "APP_NAME",
    "APP_DISPLAY_NAME",
    "VERSION",
    "MatchScoreLevel",
    "MatchSource",
    "VectorBackend",
    # Exceptions
    "InputValidationError",
    "JobMatchError",
    "MalformedResponseError",
    "NetworkError",
    "ProviderUnavailableError",
    "RequestTimeoutError",
    # Logger
    "setup_logging",
    "get_logger",
    "audit_log",
    "log",
]
