"""Recursive include, loop and conditional expansion for text documents."""

from .config import DocumentLoader, IncludeOptions
from .errors import (
    DirectiveSyntaxError,
    ExpressionEvaluationError,
    FileIncludeError,
    IncludeCycleError,
    MalformedDataError,
    MissingResourceError,
)
from .logging import configure_logging, get_logger
from .plugin import FileIncludePlugin
from .rendering import Pipeline, expand
from .template import default_functions

__version__ = "1.0.0"

__all__ = [
    "expand",
    "Pipeline",
    "IncludeOptions",
    "DocumentLoader",
    "FileIncludePlugin",
    "default_functions",
    "configure_logging",
    "get_logger",
    "FileIncludeError",
    "MissingResourceError",
    "MalformedDataError",
    "ExpressionEvaluationError",
    "IncludeCycleError",
    "DirectiveSyntaxError",
]
