"""Typed engine API bindings and extension-module bootstrap."""

from .generator import GeneratedState, Generator, PassState

__version__ = "0.1.0"

__all__ = ["GeneratedState", "Generator", "PassState", "__version__"]
