"""k1s0 switcherlabs library."""

from ._version import __version__
from .callback import callbackify
from .client import SwitcherLabsClient
from .config import SwitcherLabsConfig, build_config
from .engine import ResolutionEngine, ValueSource
from .exceptions import (
    ApiError,
    ConfigurationError,
    FlagNotFoundError,
    ParseError,
    RuleIntegrityError,
    SwitcherLabsError,
    SwitcherLabsErrorCodes,
    TransportError,
)
from .identity import IDENTITY_TTL, IdentityCache
from .loader import load_config
from .logger import new_logger
from .memory import InMemoryTransport
from .models import DynamicRule, Expression, Flag, Identity, Operator, Override, StateSnapshot
from .rules import NO_MATCH, compare, match_rule
from .state import STATE_TTL, StateCache
from .transport import HttpTransport, Transport

__all__ = [
    "__version__",
    "ApiError",
    "ConfigurationError",
    "DynamicRule",
    "Expression",
    "Flag",
    "FlagNotFoundError",
    "HttpTransport",
    "IDENTITY_TTL",
    "Identity",
    "IdentityCache",
    "InMemoryTransport",
    "NO_MATCH",
    "Operator",
    "Override",
    "ParseError",
    "ResolutionEngine",
    "RuleIntegrityError",
    "STATE_TTL",
    "StateCache",
    "StateSnapshot",
    "SwitcherLabsClient",
    "SwitcherLabsConfig",
    "SwitcherLabsError",
    "SwitcherLabsErrorCodes",
    "Transport",
    "TransportError",
    "ValueSource",
    "build_config",
    "callbackify",
    "compare",
    "load_config",
    "match_rule",
    "new_logger",
]
