"""
Loop directive expansion.

Handles ``@@loop('template', data)`` where data is an inline JSON literal or
a quoted path to a JSON file. The template is interpolated once per record,
against a scope holding only that record's fields.
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..config import DocumentLoader
from ..errors import MalformedDataError, MissingResourceError
from ..logging import get_logger
from ..template import DirectiveMatch, DirectiveScanner, Interpolator
from .include_renderer import resolve_path

logger = get_logger(__name__)

LOOP_ARGUMENTS = re.compile(r'\s*([\'"])(.+?)\1\s*,\s*(.+?)\s*$', re.DOTALL)


def parse_loop_arguments(arguments: str) -> Optional[Tuple[str, str, bool]]:
    """
    Split loop arguments into template path and data source.

    Returns:
        (template_path, source, inline) where ``inline`` tells whether
        ``source`` is a JSON literal or a data file path, or None if the
        arguments are not loop syntax
    """
    match = LOOP_ARGUMENTS.match(arguments)
    if not match:
        return None
    template_path, source = match.group(2), match.group(3)
    if source[0] in "[{":
        return template_path, source, True
    if len(source) >= 2 and source[0] in "'\"" and source[-1] == source[0]:
        return template_path, source[1:-1], False
    return None


def as_records(data: Any, source: str) -> List[Any]:
    """
    Normalize parsed loop data to a sequence of records.

    A JSON array is used in order; a single JSON object is one record.

    Raises:
        MalformedDataError: For any other JSON value
    """
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return [data]
    raise MalformedDataError(source, str(data), "expected a JSON array or object")


class LoopExpander:
    """Expands loop directives by repeating a template per data record."""

    def __init__(
        self,
        scanner: DirectiveScanner,
        loader: DocumentLoader,
        interpolator: Interpolator
    ):
        self.scanner = scanner
        self.loader = loader
        self.interpolator = interpolator

    def expand(self, document: str, directory: Path) -> str:
        """
        Replace every loop directive in a document.

        Args:
            document: Document text
            directory: Directory that template and data paths resolve against

        Returns:
            Document with loops expanded
        """
        return self.scanner.sub(document, lambda match: self.loop(match, Path(directory)))

    def load_records(self, source: str, inline: bool, directory: Path) -> List[Any]:
        """
        Resolve a loop's data source to records.

        Raises:
            MalformedDataError: If the JSON is invalid or has the wrong shape
            MissingResourceError: If the data file cannot be read
        """
        if inline:
            return as_records(self.loader.parse_json(source), source)
        data_path = resolve_path(directory, source)
        return as_records(self.loader.load_json(data_path), str(data_path))

    def loop(self, match: DirectiveMatch, directory: Path) -> str:
        """Expand a single loop directive."""
        parsed = parse_loop_arguments(match.arguments)
        if parsed is None:
            logger.debug("loop_skipped", directive=match.text)
            return match.text

        template_path, source, inline = parsed
        try:
            records = self.load_records(source, inline, directory)
        except (MalformedDataError, MissingResourceError) as e:
            logger.warning("loop_data_invalid", source=source, error=str(e))
            records = []

        loop_path = resolve_path(directory, template_path)
        try:
            template = self.loader.read_document(loop_path)
        except MissingResourceError as e:
            logger.warning("loop_template_failed", path=str(loop_path), error=str(e))
            return ""

        # Each record is the whole scope; the ambient scope is not inherited
        rendered = []
        for record in records:
            record_scope: Dict[str, Any] = record if isinstance(record, dict) else {}
            rendered.append(self.interpolator.interpolate(template, record_scope))

        logger.debug("loop_expanded", path=str(loop_path), records=len(records))
        return "".join(rendered)
