"""Runtime extensions."""

from .assurance import Assurance
from .base import Extension, ExtensionApi
from .configuration import ConfigurationExtension
from .edge import Edge
from .identity import Identity
from .lifecycle import Lifecycle
from .signal import Signal

__all__ = [
    "Extension",
    "ExtensionApi",
    "ConfigurationExtension",
    "Identity",
    "Lifecycle",
    "Signal",
    "Assurance",
    "Edge",
]
