"""Post-processing of rendered bindings."""

from .formatter import KNOWN_IMPORTS, SourceFormatter
from .markers import GITATTRIBUTES_FILE, GitAttributesMarker

__all__ = ["GITATTRIBUTES_FILE", "GitAttributesMarker", "KNOWN_IMPORTS", "SourceFormatter"]
