"""
Directive scanning.

Finds ``marker(arguments)`` directives, and ``marker(condition) { body }``
conditionals, left to right and without overlap, then splices replacements
in a single pass the way ``re.sub`` does.

Argument lists are closed by bracket depth, skipping quoted strings, so JSON
arguments and conditions may nest ``()``, ``[]`` and ``{}``. Conditional
bodies are closed by brace depth only: body text is free prose where quotes
are not balanced, so a body must keep its own braces balanced.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from ..errors import DirectiveSyntaxError
from ..logging import get_logger

logger = get_logger(__name__)

OPENERS = {"(": ")", "[": "]", "{": "}"}
QUOTES = ("'", '"')


@dataclass
class DirectiveMatch:
    """One directive occurrence found in a document."""

    start: int
    end: int
    text: str
    arguments: str
    body: Optional[str] = None


def find_argument_end(text: str, open_index: int) -> int:
    """
    Find the bracket that closes the one at ``open_index``.

    Brackets inside single- or double-quoted strings are ignored and
    backslash escapes inside strings are honored.

    Returns:
        Index of the closing bracket, or -1 if it is never closed
    """
    expected: List[str] = []
    quote = None
    i = open_index
    while i < len(text):
        char = text[i]
        if quote:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in QUOTES:
            quote = char
        elif char in OPENERS:
            expected.append(OPENERS[char])
        elif expected and char == expected[-1]:
            expected.pop()
            if not expected:
                return i
        i += 1
    return -1


def find_body_end(text: str, open_index: int) -> int:
    """Find the brace closing the one at ``open_index`` by depth, or -1."""
    depth = 0
    for i in range(open_index, len(text)):
        if text[i] == "{":
            depth += 1
        elif text[i] == "}":
            depth -= 1
            if depth == 0:
                return i
    return -1


def _skip_whitespace(text: str, index: int) -> int:
    while index < len(text) and text[index].isspace():
        index += 1
    return index


class DirectiveScanner:
    """
    Matches and replaces one directive kind.

    Args:
        marker: Literal token that starts the directive (e.g., "@@include")
        conditional: Whether the directive carries a ``{ body }``
        opaque: Scanner whose directives are copied through untouched, so
            their arguments and bodies are never searched for this marker
    """

    def __init__(
        self,
        marker: str,
        conditional: bool = False,
        opaque: Optional["DirectiveScanner"] = None
    ):
        self.marker = marker
        self.conditional = conditional
        self.opaque = opaque

    def match_at(self, text: str, start: int) -> Optional[DirectiveMatch]:
        """
        Match a directive whose marker begins at ``start``.

        Returns:
            The match, or None if the marker is not followed by directive syntax

        Raises:
            DirectiveSyntaxError: If the argument list or body is never closed
        """
        pos = start + len(self.marker)
        if self.conditional:
            pos = _skip_whitespace(text, pos)
        if not text.startswith("(", pos):
            return None

        close = find_argument_end(text, pos)
        if close < 0:
            raise DirectiveSyntaxError(self.marker, start, "Unterminated argument list")
        arguments = text[pos + 1:close]
        end = close + 1

        body = None
        if self.conditional:
            brace = _skip_whitespace(text, end)
            if not text.startswith("{", brace):
                return None
            body_close = find_body_end(text, brace)
            if body_close < 0:
                raise DirectiveSyntaxError(self.marker, start, "Unterminated body")
            body = text[brace + 1:body_close]
            end = body_close + 1

        if text.startswith(";", end):
            end += 1
        if self.conditional:
            end = _skip_whitespace(text, end)

        return DirectiveMatch(start, end, text[start:end], arguments, body)

    def _next_marker(self, text: str, search: int) -> Tuple[int, "DirectiveScanner"]:
        start = text.find(self.marker, search)
        if self.opaque is not None:
            opaque_start = text.find(self.opaque.marker, search)
            if opaque_start >= 0 and (start < 0 or opaque_start <= start):
                return opaque_start, self.opaque
        return start, self

    def sub(self, text: str, replace: Callable[[DirectiveMatch], str]) -> str:
        """
        Replace every directive of this kind in one left-to-right pass.

        Unterminated directives are logged and left in place. Replacement
        text is not scanned again.

        Args:
            text: Document text
            replace: Called with each match, returns its replacement

        Returns:
            Text with all matches replaced
        """
        pieces: List[str] = []
        copied = 0
        search = 0
        while True:
            start, scanner = self._next_marker(text, search)
            if start < 0:
                break
            try:
                match = scanner.match_at(text, start)
            except DirectiveSyntaxError as e:
                if scanner is self:
                    logger.warning(
                        "directive_syntax_error",
                        directive=e.directive,
                        position=e.position,
                        error=e.reason,
                    )
                match = None
            if match is None:
                search = start + len(scanner.marker)
                continue
            if scanner is self:
                pieces.append(text[copied:match.start])
                pieces.append(replace(match))
                copied = match.end
            search = match.end
        pieces.append(text[copied:])
        return "".join(pieces)
