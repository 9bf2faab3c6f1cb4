"""
Algorithm setup: isolated loading and per-mode job configuration.
"""

from .isolator import Isolator, IsolatorTimeoutError, IsolatorFaultError
from .loader import (
    Loader,
    AlgorithmCandidate,
    InstantiationError,
    NoMatchingTypeError,
    AmbiguousTypeError,
    InstantiationTimeoutError,
    ConstructionFaultError,
    discover_candidates,
    match_type_name,
    type_name_selector,
)
from .base import ISetupHandler, SetupResult, ErrorList, DEFAULT_STARTING_DATE
from .paper import PaperTradingSetupHandler
from .console import ConsoleSetupHandler, ERROR_PREFIX
from .factory import create_setup_handler

__all__ = [
    "Isolator",
    "IsolatorTimeoutError",
    "IsolatorFaultError",
    "Loader",
    "AlgorithmCandidate",
    "InstantiationError",
    "NoMatchingTypeError",
    "AmbiguousTypeError",
    "InstantiationTimeoutError",
    "ConstructionFaultError",
    "discover_candidates",
    "match_type_name",
    "type_name_selector",
    "ISetupHandler",
    "SetupResult",
    "ErrorList",
    "DEFAULT_STARTING_DATE",
    "PaperTradingSetupHandler",
    "ConsoleSetupHandler",
    "ERROR_PREFIX",
    "create_setup_handler",
]
