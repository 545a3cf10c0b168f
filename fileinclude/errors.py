"""
Error types raised while expanding documents.

Every error here is raised by a component and caught again by the resolver
that owns the directive, so none of them escapes ``expand``.
"""

from typing import Sequence


class FileIncludeError(Exception):
    """Base class for all expansion errors."""


class MissingResourceError(FileIncludeError):
    """A referenced document or data file could not be read."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"Failed to read file: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class MalformedDataError(FileIncludeError):
    """Inline or file-sourced JSON could not be parsed or has the wrong shape."""

    def __init__(self, source: str, text: str, reason: str = ""):
        self.source = source
        self.text = text
        self.reason = reason
        message = f"Failed to parse JSON from {source}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ExpressionEvaluationError(FileIncludeError):
    """
    An expression failed to compile or raised while being evaluated.

    Attributes:
        expression: The original expression text
        available: Names that were bound in the evaluation environment
    """

    def __init__(self, message: str, expression: str, available: Sequence[str] = ()):
        self.expression = expression
        self.available = tuple(sorted(available))
        super().__init__(f"{message} in expression: {expression}")


class IncludeCycleError(FileIncludeError):
    """A document includes itself, directly or through other documents."""

    def __init__(self, path: str, chain: Sequence[str]):
        self.path = path
        self.chain = tuple(chain)
        trail = " -> ".join([*self.chain, path])
        super().__init__(f"Include cycle detected: {trail}")


class DirectiveSyntaxError(FileIncludeError):
    """A directive starts but its arguments or body are never closed."""

    def __init__(self, directive: str, position: int, reason: str):
        self.directive = directive
        self.position = position
        self.reason = reason
        super().__init__(f"{reason} for {directive} at position {position}")
