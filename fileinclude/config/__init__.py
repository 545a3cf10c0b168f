"""Configuration and document loading modules."""

from .loaders import DocumentLoader
from .options import IncludeOptions

__all__ = ["DocumentLoader", "IncludeOptions"]
