"""
Twitter/X agent client.

Session-gated lifecycle orchestration for the posting, search,
interaction and Spaces subsystems of an agent.
"""

from .cache import InMemoryCacheManager, cookie_cache_key
from .config import TwitterIdentity, TwitterSettings, get_settings, validate_twitter_config
from .errors import (
    AuthenticationFailure,
    ConfigValidationError,
    SessionUnavailable,
    TwitterClientError,
    TwitterErrorCode,
)
from .facade import TwitterClientInterface
from .log import configure_logging
from .orchestrator import LifecycleState, TwitterManager, build_twitter_manager
from .session import ClientBase, SessionHolder, SessionProbe
from .validator import CredentialValidator

__all__ = [
    # Facade
    "TwitterClientInterface",
    # Orchestration
    "TwitterManager",
    "LifecycleState",
    "build_twitter_manager",
    # Session
    "ClientBase",
    "SessionHolder",
    "SessionProbe",
    "CredentialValidator",
    # Config
    "TwitterSettings",
    "TwitterIdentity",
    "get_settings",
    "validate_twitter_config",
    # Cache
    "InMemoryCacheManager",
    "cookie_cache_key",
    # Errors
    "TwitterClientError",
    "TwitterErrorCode",
    "ConfigValidationError",
    "AuthenticationFailure",
    "SessionUnavailable",
    # Logging
    "configure_logging",
]
