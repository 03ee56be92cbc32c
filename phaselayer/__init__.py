"""
phaselayer - phase-aware HTTP middleware composition.

Handlers written in any of the supported conventions are normalized into
a single ``(next_handler) -> handler`` form, ordered per phase by priority,
and compiled on first use into one chain that always ends in a terminal
handler. Failures escaping a phase are redirected to the error phase.
"""

from phaselayer.adapter import HandlerShape, Tagged, adapt, classify
from phaselayer.constants import (
    ERROR_CONTEXT_KEY,
    ERROR_PHASE,
    LIBRARY_NAME,
    LIBRARY_VERSION,
    REQUEST_PHASE,
)
from phaselayer.errors import (
    ConfigurationError,
    InvalidPriorityError,
    PhaseLayerError,
    RegistrationError,
    UnsupportedHandlerError,
)
from phaselayer.http import ResponseWriter
from phaselayer.layer import Layer, Plugin, Registrar
from phaselayer.stack import Priority, PriorityStack

__version__ = LIBRARY_VERSION
__app_name__ = LIBRARY_NAME

__all__ = [
    "ConfigurationError",
    "ERROR_CONTEXT_KEY",
    "ERROR_PHASE",
    "HandlerShape",
    "InvalidPriorityError",
    "Layer",
    "PhaseLayerError",
    "Plugin",
    "Priority",
    "PriorityStack",
    "REQUEST_PHASE",
    "Registrar",
    "RegistrationError",
    "ResponseWriter",
    "Tagged",
    "UnsupportedHandlerError",
    "__app_name__",
    "__version__",
    "adapt",
    "classify",
]
